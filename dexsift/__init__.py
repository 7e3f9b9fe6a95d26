"""
dexsift -- JUnit3 Test Discovery for Android Dex Files
=======================================================

dexsift reads compiled Android bytecode (dex files, or the ``classes*.dex``
entries of an APK) and lists every JUnit3 test method it contains, as
``com.example.FooTest#testBar`` identifiers suitable for test sharding.

Capabilities:
    - Bounds-checked dex parsing (LEB128, MUTF-8 strings, id tables,
      class data) straight from the raw buffer
    - Cross-file inheritance closure: test classes may extend base classes
      defined in any other dex file of the input
    - Plain-text test list and JSON report output

References:
    - Google. (2024). DEX Format. Android Open Source Project.
    - JUnit 3.8 TestCase naming convention (``test*`` methods).
"""

from dexsift.core import (
    DexFile,
    DiscoveryResult,
    InheritanceClosure,
    SiftEngine,
    find_junit3_tests,
)

__version__ = "1.0.0"
__all__ = [
    "DexFile",
    "DiscoveryResult",
    "InheritanceClosure",
    "SiftEngine",
    "find_junit3_tests",
]
