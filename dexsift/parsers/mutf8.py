"""
Modified UTF-8 Decoding
========================

Dex string data is stored in *modified* UTF-8 (MUTF-8), which differs from
standard UTF-8 in two ways:

* U+0000 is encoded as the two-byte form ``C0 80`` instead of a raw zero;
* supplementary characters are stored as a surrogate pair, each half
  encoded separately in the three-byte form.

The length prefix of a ``string_data_item`` counts UTF-16 code units, not
bytes, so decoding proceeds unit by unit until the declared count has been
produced.

Reference:
    Google. (2024). DEX Format -- MUTF-8 (Modified UTF-8) Encoding.
    https://source.android.com/docs/core/runtime/dex-format#mutf-8
"""

from __future__ import annotations

import struct

from dexsift.parsers.byte_cursor import ByteCursor
from dexsift.parsers.errors import DexFormatError


def decode_mutf8(cursor: ByteCursor, offset: int, utf16_length: int) -> tuple[str, int]:
    """Decode *utf16_length* code units of MUTF-8 starting at *offset*.

    Args:
        cursor: Cursor over the dex buffer.
        offset: Offset of the first encoded byte.
        utf16_length: Number of UTF-16 code units to produce.

    Returns:
        Tuple of ``(text, bytes_consumed)``.

    Raises:
        OutOfBoundsError: The buffer ends mid-string.
        DexFormatError: A byte sequence is not valid MUTF-8.
    """
    units: list[int] = []
    pos = offset

    while len(units) < utf16_length:
        a = cursor.u8(pos)
        if a < 0x80:
            units.append(a)
            pos += 1
        elif (a & 0xE0) == 0xC0:
            b = _continuation(cursor, pos + 1)
            units.append(((a & 0x1F) << 6) | b)
            pos += 2
        elif (a & 0xF0) == 0xE0:
            b = _continuation(cursor, pos + 1)
            c = _continuation(cursor, pos + 2)
            units.append(((a & 0x0F) << 12) | (b << 6) | c)
            pos += 3
        else:
            raise DexFormatError(
                f"invalid MUTF-8 lead byte 0x{a:02x} at offset 0x{pos:x}"
            )

    # Surrogate pairs are re-joined by the UTF-16 codec; lone halves survive
    raw = struct.pack(f"<{len(units)}H", *units)
    return raw.decode("utf-16-le", errors="surrogatepass"), pos - offset


def encode_mutf8(text: str) -> tuple[bytes, int]:
    """Encode *text* as MUTF-8.

    Returns:
        Tuple of ``(encoded_bytes, utf16_length)``.
    """
    raw = text.encode("utf-16-le", errors="surrogatepass")
    units = struct.unpack(f"<{len(raw) // 2}H", raw)
    out = bytearray()
    for unit in units:
        if 0 < unit < 0x80:
            out.append(unit)
        elif unit < 0x800:
            out.append(0xC0 | (unit >> 6))
            out.append(0x80 | (unit & 0x3F))
        else:
            out.append(0xE0 | (unit >> 12))
            out.append(0x80 | ((unit >> 6) & 0x3F))
            out.append(0x80 | (unit & 0x3F))
    return bytes(out), len(units)


def _continuation(cursor: ByteCursor, pos: int) -> int:
    byte = cursor.u8(pos)
    if (byte & 0xC0) != 0x80:
        raise DexFormatError(
            f"invalid MUTF-8 continuation byte 0x{byte:02x} at offset 0x{pos:x}"
        )
    return byte & 0x3F
