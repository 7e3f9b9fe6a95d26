"""
dexsift Parsers
================

Bounds-checked readers for the Android DEX format: the byte cursor with
LEB128 decoding, MUTF-8 string decoding, the id tables and class data.
"""

from dexsift.parsers.byte_cursor import ByteCursor
from dexsift.parsers.class_data import ClassDataItem, accumulate_deltas, decode_class_data
from dexsift.parsers.dex_parser import ClassDefItem, DexHeader, DexParser, MethodIdItem
from dexsift.parsers.errors import DexFormatError, OutOfBoundsError

__all__ = [
    "ByteCursor",
    "ClassDataItem",
    "ClassDefItem",
    "DexFormatError",
    "DexHeader",
    "DexParser",
    "MethodIdItem",
    "OutOfBoundsError",
    "accumulate_deltas",
    "decode_class_data",
]
