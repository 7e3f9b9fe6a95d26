"""
dexsift Shared Module
======================

Configuration, logging and console utilities used across dexsift.
"""

from shared.config import DexSiftConfig

__all__ = ["DexSiftConfig"]
