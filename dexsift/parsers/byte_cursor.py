"""
Byte Cursor
============

Bounds-checked reader over an immutable dex buffer.

Two access styles are offered:

* absolute reads (``u8``/``u16``/``u32``/``uleb128`` ...) taking an offset
  and leaving the cursor position untouched;
* sequential reads (``read_uleb128``) starting at the current position
  and advancing it past the consumed bytes.

All fixed-width values are little-endian.  Variable-length values use the
LEB128 encoding of the dex format: seven payload bits per byte, high bit set
on every byte except the last, at most five bytes for a 32-bit value.

Reference:
    Google. (2024). DEX Format -- LEB128.
    https://source.android.com/docs/core/runtime/dex-format#leb128
"""

from __future__ import annotations

import struct

from dexsift.parsers.errors import DexFormatError, OutOfBoundsError


# A 32-bit value never needs more than five LEB128 bytes
MAX_LEB128_BYTES: int = 5

_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")


class ByteCursor:
    """Random-access and sequential reader over ``bytes``.

    Usage::

        cursor = ByteCursor(raw)
        size = cursor.u32(56)                  # absolute, no side effect
        cursor.seek(class_data_off)
        count = cursor.read_uleb128()          # sequential
    """

    __slots__ = ("_data", "_length", "_pos")

    def __init__(self, data: bytes, position: int = 0) -> None:
        self._data: bytes = bytes(data)
        self._length: int = len(self._data)
        self._pos: int = position

    def __len__(self) -> int:
        return self._length

    @property
    def data(self) -> bytes:
        """The underlying buffer."""
        return self._data

    # ------------------------------------------------------------------ #
    #  Position handling
    # ------------------------------------------------------------------ #

    def tell(self) -> int:
        """Return the current position."""
        return self._pos

    def seek(self, offset: int) -> None:
        """Move the cursor to *offset*.

        Seeking to exactly the end of the buffer is allowed; the next read
        will fail.
        """
        if offset < 0 or offset > self._length:
            raise OutOfBoundsError(offset, 0, self._length)
        self._pos = offset

    # ------------------------------------------------------------------ #
    #  Absolute fixed-width reads
    # ------------------------------------------------------------------ #

    def _require(self, offset: int, size: int) -> None:
        if offset < 0 or offset + size > self._length:
            raise OutOfBoundsError(offset, size, self._length)

    def u8(self, offset: int) -> int:
        self._require(offset, 1)
        return self._data[offset]

    def u16(self, offset: int) -> int:
        self._require(offset, 2)
        return _U16.unpack_from(self._data, offset)[0]

    def u32(self, offset: int) -> int:
        self._require(offset, 4)
        return _U32.unpack_from(self._data, offset)[0]

    def slice(self, offset: int, size: int) -> bytes:
        """Return *size* raw bytes starting at *offset*."""
        self._require(offset, size)
        return self._data[offset:offset + size]

    # ------------------------------------------------------------------ #
    #  Absolute LEB128 reads
    # ------------------------------------------------------------------ #

    def uleb128(self, offset: int) -> tuple[int, int]:
        """Decode an unsigned LEB128 value at *offset*.

        Returns:
            Tuple of ``(value, bytes_consumed)``.

        Raises:
            OutOfBoundsError: The buffer ends before the terminating byte.
            DexFormatError: The encoding runs past five bytes.
        """
        result = 0
        shift = 0
        consumed = 0

        while True:
            if consumed == MAX_LEB128_BYTES:
                raise DexFormatError(
                    f"uleb128 at offset 0x{offset:x} exceeds "
                    f"{MAX_LEB128_BYTES} bytes"
                )
            pos = offset + consumed
            if pos < 0 or pos >= self._length:
                raise OutOfBoundsError(pos, 1, self._length)
            byte = self._data[pos]
            result |= (byte & 0x7F) << shift
            consumed += 1
            if (byte & 0x80) == 0:
                return result, consumed
            shift += 7

    # ------------------------------------------------------------------ #
    #  Sequential reads
    # ------------------------------------------------------------------ #

    def read_uleb128(self) -> int:
        value, consumed = self.uleb128(self._pos)
        self._pos += consumed
        return value
