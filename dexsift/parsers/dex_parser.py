"""
Android DEX Format Parser
===========================

Struct-based reader for the Dalvik Executable (DEX) format, versions 035
through 040.

The parser decodes the header and the fixed-size id tables once:

    - DEX header (magic, checksum, signature, file size, endianness)
    - String IDs table (offsets only; string data is decoded on demand)
    - Type IDs table
    - Proto IDs table (method prototypes)
    - Method IDs table
    - Class definitions table

String data is resolved lazily and cached, since a test scan touches only a
small fraction of the string pool.  All reads go through
:class:`~dexsift.parsers.byte_cursor.ByteCursor`, so a truncated or
inconsistent file raises :class:`~dexsift.parsers.errors.OutOfBoundsError`
instead of yielding a silently wrong value.

References:
    - Google. (2024). DEX Format. Android Open Source Project.
      https://source.android.com/docs/core/runtime/dex-format
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from dexsift.parsers.byte_cursor import ByteCursor
from dexsift.parsers.class_data import ClassDataItem, decode_class_data
from dexsift.parsers.errors import DexFormatError
from dexsift.parsers.mutf8 import decode_mutf8


# ---------------------------------------------------------------------------
# DEX Constants
# ---------------------------------------------------------------------------

DEX_MAGIC_PREFIX: bytes = b"dex\n"
DEX_SUPPORTED_VERSIONS: set[bytes] = {
    b"035\x00",
    b"036\x00",
    b"037\x00",
    b"038\x00",
    b"039\x00",
    b"040\x00",
}
HEADER_SIZE: int = 0x70

# Endianness tags
ENDIAN_CONSTANT: int = 0x12345678
REVERSE_ENDIAN_CONSTANT: int = 0x78563412

# On-disk sentinels
NO_INDEX: int = 0xFFFFFFFF
NO_OFFSET: int = 0

# Record sizes
STRING_ID_SIZE: int = 4
TYPE_ID_SIZE: int = 4
PROTO_ID_SIZE: int = 12
METHOD_ID_SIZE: int = 8
CLASS_DEF_SIZE: int = 32


# ---------------------------------------------------------------------------
# Parsed structures
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class DexHeader:
    """Parsed 112-byte DEX file header."""
    version: str
    checksum: int
    signature: bytes
    file_size: int
    header_size: int
    endian_tag: int
    link_size: int
    link_off: int
    map_off: int
    string_ids_size: int
    string_ids_off: int
    type_ids_size: int
    type_ids_off: int
    proto_ids_size: int
    proto_ids_off: int
    field_ids_size: int
    field_ids_off: int
    method_ids_size: int
    method_ids_off: int
    class_defs_size: int
    class_defs_off: int
    data_size: int
    data_off: int


@dataclass(frozen=True, slots=True)
class ProtoIdItem:
    """Parsed proto_id_item (method prototype)."""
    shorty_idx: int
    return_type_idx: int
    parameters_off: int


@dataclass(frozen=True, slots=True)
class MethodIdItem:
    """Parsed method_id_item."""
    class_idx: int
    proto_idx: int
    name_idx: int


@dataclass(frozen=True, slots=True)
class ClassDefItem:
    """Parsed class_def_item.

    The on-disk sentinels are folded into ``None`` here: a class without a
    superclass (``java.lang.Object``) has ``superclass_idx is None`` and a
    class without members (marker interfaces, for instance) has
    ``class_data_off is None``.
    """
    class_idx: int
    access_flags: int
    superclass_idx: Optional[int]
    interfaces_off: int
    source_file_idx: Optional[int]
    annotations_off: int
    class_data_off: Optional[int]
    static_values_off: int


# ---------------------------------------------------------------------------
# DEX Parser
# ---------------------------------------------------------------------------

class DexParser:
    """Struct-based Android DEX format parser.

    Usage::

        parser = DexParser(raw_bytes)
        parser.parse()
        for class_def in parser.class_defs:
            print(parser.resolve_descriptor(class_def.class_idx))

    Raises:
        DexFormatError: From :meth:`parse` when the magic, version or
            endianness is unsupported.
        OutOfBoundsError: When a table or string reaches past the buffer.
    """

    def __init__(self, data: bytes) -> None:
        """Initialise the parser with raw DEX data.

        Args:
            data: Complete DEX file contents as bytes.
        """
        self._cursor: ByteCursor = ByteCursor(data)
        self._header: Optional[DexHeader] = None
        self._string_ids: list[int] = []       # Offsets of string_data_items
        self._type_ids: list[int] = []         # Each is a string_id index
        self._proto_ids: list[ProtoIdItem] = []
        self._method_ids: list[MethodIdItem] = []
        self._class_defs: list[ClassDefItem] = []
        self._string_cache: dict[int, str] = {}

    # ------------------------------------------------------------------ #
    #  Public interface
    # ------------------------------------------------------------------ #

    def parse(self) -> DexParser:
        """Parse the header and id tables.  Returns ``self``."""
        self._check_magic()
        self._header = self._parse_header()
        self._string_ids = self._parse_u32_table(
            self._header.string_ids_off, self._header.string_ids_size,
        )
        self._type_ids = self._parse_u32_table(
            self._header.type_ids_off, self._header.type_ids_size,
        )
        self._proto_ids = self._parse_proto_ids()
        self._method_ids = self._parse_method_ids()
        self._class_defs = self._parse_class_defs()
        return self

    @property
    def header(self) -> DexHeader:
        if self._header is None:
            raise DexFormatError("parse() has not been called")
        return self._header

    @property
    def cursor(self) -> ByteCursor:
        return self._cursor

    @property
    def size(self) -> int:
        return len(self._cursor)

    @property
    def string_ids(self) -> list[int]:
        return self._string_ids

    @property
    def type_ids(self) -> list[int]:
        return self._type_ids

    @property
    def proto_ids(self) -> list[ProtoIdItem]:
        return self._proto_ids

    @property
    def method_ids(self) -> list[MethodIdItem]:
        return self._method_ids

    @property
    def class_defs(self) -> list[ClassDefItem]:
        return self._class_defs

    # ------------------------------------------------------------------ #
    #  Resolvers
    # ------------------------------------------------------------------ #

    def resolve_string(self, string_idx: int) -> str:
        """Decode the string at *string_idx* of the string_ids table.

        A ``string_data_item`` is a ULEB128 length in UTF-16 code units
        followed by that many MUTF-8 encoded code units.
        """
        cached = self._string_cache.get(string_idx)
        if cached is not None:
            return cached

        offset = _lookup(self._string_ids, string_idx, "string")
        utf16_length, consumed = self._cursor.uleb128(offset)
        value, _ = decode_mutf8(self._cursor, offset + consumed, utf16_length)
        self._string_cache[string_idx] = value
        return value

    def resolve_descriptor(self, type_idx: int) -> str:
        """Return the type descriptor (e.g. ``Ljava/lang/Object;``)."""
        return self.resolve_string(_lookup(self._type_ids, type_idx, "type"))

    def method_id(self, method_idx: int) -> MethodIdItem:
        return _lookup(self._method_ids, method_idx, "method")

    def method_name(self, method_idx: int) -> str:
        """Return the simple name of the method at *method_idx*."""
        return self.resolve_string(self.method_id(method_idx).name_idx)

    def class_data(self, class_def: ClassDefItem) -> ClassDataItem:
        """Decode the class data of *class_def*.

        Raises:
            ValueError: *class_def* has no class data
                (``class_data_off is None``); callers check first.
        """
        if class_def.class_data_off is None:
            raise ValueError("class has no class_data_item")
        return decode_class_data(self._cursor, class_def.class_data_off)

    # ------------------------------------------------------------------ #
    #  Header parsing
    # ------------------------------------------------------------------ #

    def _check_magic(self) -> None:
        if len(self._cursor) < HEADER_SIZE:
            raise DexFormatError(
                f"file too small for a dex header ({len(self._cursor)} bytes)"
            )
        if self._cursor.slice(0, 4) != DEX_MAGIC_PREFIX:
            raise DexFormatError("missing dex magic")
        version = self._cursor.slice(4, 4)
        if version not in DEX_SUPPORTED_VERSIONS:
            raise DexFormatError(f"unsupported dex version {version!r}")

        endian_tag = self._cursor.u32(40)
        if endian_tag == REVERSE_ENDIAN_CONSTANT:
            raise DexFormatError("big-endian dex files are not supported")
        if endian_tag != ENDIAN_CONSTANT:
            raise DexFormatError(f"invalid endian tag 0x{endian_tag:08x}")

    def _parse_header(self) -> DexHeader:
        """Parse the 112-byte DEX file header."""
        c = self._cursor
        return DexHeader(
            version=c.slice(4, 3).decode("ascii"),
            checksum=c.u32(8),
            signature=c.slice(12, 20),  # 20 bytes SHA-1
            file_size=c.u32(32),
            header_size=c.u32(36),
            endian_tag=c.u32(40),
            link_size=c.u32(44),
            link_off=c.u32(48),
            map_off=c.u32(52),
            string_ids_size=c.u32(56),
            string_ids_off=c.u32(60),
            type_ids_size=c.u32(64),
            type_ids_off=c.u32(68),
            proto_ids_size=c.u32(72),
            proto_ids_off=c.u32(76),
            field_ids_size=c.u32(80),
            field_ids_off=c.u32(84),
            method_ids_size=c.u32(88),
            method_ids_off=c.u32(92),
            class_defs_size=c.u32(96),
            class_defs_off=c.u32(100),
            data_size=c.u32(104),
            data_off=c.u32(108),
        )

    # ------------------------------------------------------------------ #
    #  Id tables
    # ------------------------------------------------------------------ #

    def _parse_u32_table(self, table_off: int, count: int) -> list[int]:
        """Parse a table of ``uint`` records (string_ids, type_ids)."""
        return [self._cursor.u32(table_off + i * 4) for i in range(count)]

    def _parse_proto_ids(self) -> list[ProtoIdItem]:
        """Parse the proto_ids table.

        Each proto_id_item is 12 bytes:
            - shorty_idx: uint32 (string ID for shorty descriptor)
            - return_type_idx: uint32 (type ID for return type)
            - parameters_off: uint32 (offset to type_list, or 0)
        """
        h = self.header
        c = self._cursor
        protos: list[ProtoIdItem] = []
        for i in range(h.proto_ids_size):
            offset = h.proto_ids_off + i * PROTO_ID_SIZE
            protos.append(ProtoIdItem(
                shorty_idx=c.u32(offset),
                return_type_idx=c.u32(offset + 4),
                parameters_off=c.u32(offset + 8),
            ))
        return protos

    def _parse_method_ids(self) -> list[MethodIdItem]:
        """Parse the method_ids table.

        Each method_id_item is 8 bytes:
            - class_idx: uint16 (type ID)
            - proto_idx: uint16 (proto ID)
            - name_idx: uint32 (string ID)
        """
        h = self.header
        c = self._cursor
        methods: list[MethodIdItem] = []
        for i in range(h.method_ids_size):
            offset = h.method_ids_off + i * METHOD_ID_SIZE
            methods.append(MethodIdItem(
                class_idx=c.u16(offset),
                proto_idx=c.u16(offset + 2),
                name_idx=c.u32(offset + 4),
            ))
        return methods

    def _parse_class_defs(self) -> list[ClassDefItem]:
        """Parse the class_defs table (32 bytes per entry)."""
        h = self.header
        c = self._cursor
        class_defs: list[ClassDefItem] = []
        for i in range(h.class_defs_size):
            offset = h.class_defs_off + i * CLASS_DEF_SIZE
            superclass_idx = c.u32(offset + 8)
            source_file_idx = c.u32(offset + 16)
            class_data_off = c.u32(offset + 24)
            class_defs.append(ClassDefItem(
                class_idx=c.u32(offset),
                access_flags=c.u32(offset + 4),
                superclass_idx=None if superclass_idx == NO_INDEX else superclass_idx,
                interfaces_off=c.u32(offset + 12),
                source_file_idx=None if source_file_idx == NO_INDEX else source_file_idx,
                annotations_off=c.u32(offset + 20),
                class_data_off=None if class_data_off == NO_OFFSET else class_data_off,
                static_values_off=c.u32(offset + 28),
            ))
        return class_defs


def _lookup(table: list, index: int, kind: str):
    if not 0 <= index < len(table):
        raise DexFormatError(
            f"{kind} index {index} out of range (table size {len(table)})"
        )
    return table[index]
