"""
dexsift Core Module
====================

The dex file aggregate, the cross-file inheritance closure, the discovery
engine and its result models.
"""

from dexsift.core.closure import (
    DEFAULT_DESCRIPTORS,
    ClosureResult,
    InheritanceClosure,
    find_junit3_tests,
)
from dexsift.core.dex_file import DexFile
from dexsift.core.engine import SiftEngine
from dexsift.core.formatting import format_class_name, make_formatter
from dexsift.core.models import DexFileSummary, DiscoveryResult

__all__ = [
    "DEFAULT_DESCRIPTORS",
    "ClosureResult",
    "DexFile",
    "DexFileSummary",
    "DiscoveryResult",
    "InheritanceClosure",
    "SiftEngine",
    "find_junit3_tests",
    "format_class_name",
    "make_formatter",
]
