"""
Dex Parsing Errors
===================

Exception taxonomy for the dex reader.  Every failure raised while decoding
a buffer derives from :class:`DexFormatError`, so callers that want to skip
a malformed file only need a single ``except`` clause.
"""

from __future__ import annotations


class DexFormatError(ValueError):
    """The buffer does not hold a well-formed dex image."""


class OutOfBoundsError(DexFormatError):
    """A read required bytes beyond the end of the buffer.

    Attributes:
        offset: Absolute offset where the read started.
        size: Number of bytes the read needed.
        length: Total buffer length.
    """

    def __init__(self, offset: int, size: int, length: int) -> None:
        self.offset = offset
        self.size = size
        self.length = length
        super().__init__(
            f"read of {size} byte(s) at offset 0x{offset:x} exceeds "
            f"buffer length 0x{length:x}"
        )


__all__ = ["DexFormatError", "OutOfBoundsError"]
