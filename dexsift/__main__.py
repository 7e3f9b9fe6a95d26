"""
dexsift Module Entry Point
===========================

Allows running the CLI via: python -m dexsift
"""

from dexsift.cli import main

if __name__ == "__main__":
    main()
