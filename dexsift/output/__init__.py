"""
dexsift Output Module
======================

Console display and report writers for discovery results.
"""

from dexsift.output.console import SiftConsoleOutput
from dexsift.output.report import SiftReportGenerator

__all__ = ["SiftConsoleOutput", "SiftReportGenerator"]
