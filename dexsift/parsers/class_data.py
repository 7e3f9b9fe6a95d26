"""
Class Data Decoder
===================

Decodes ``class_data_item`` blobs: the per-class lists of fields and methods
referenced from a ``class_def_item``.

Layout (all values ULEB128)::

    static_fields_size
    instance_fields_size
    direct_methods_size
    virtual_methods_size
    encoded_field[static_fields_size]      (field_idx_diff, access_flags)
    encoded_field[instance_fields_size]
    encoded_method[direct_methods_size]    (method_idx_diff, access_flags, code_off)
    encoded_method[virtual_methods_size]

Indices inside each list are delta-encoded: the first entry holds the
absolute index, every following entry the difference from its predecessor.

Reference:
    Google. (2024). DEX Format -- class_data_item.
    https://source.android.com/docs/core/runtime/dex-format#class-data-item
"""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import accumulate
from typing import Iterable

from dexsift.parsers.byte_cursor import ByteCursor


@dataclass(frozen=True, slots=True)
class EncodedField:
    """One ``encoded_field`` entry."""
    field_idx_diff: int
    access_flags: int


@dataclass(frozen=True, slots=True)
class EncodedMethod:
    """One ``encoded_method`` entry.

    Attributes:
        method_idx_diff: Method index, relative to the previous entry of
            the same list (absolute for the first entry).
        access_flags: Method access flags.
        code_off: Offset of the ``code_item``, ``0`` for abstract/native.
    """
    method_idx_diff: int
    access_flags: int
    code_off: int


@dataclass(frozen=True, slots=True)
class ClassDataItem:
    """Decoded ``class_data_item``."""
    static_fields: tuple[EncodedField, ...] = field(default_factory=tuple)
    instance_fields: tuple[EncodedField, ...] = field(default_factory=tuple)
    direct_methods: tuple[EncodedMethod, ...] = field(default_factory=tuple)
    virtual_methods: tuple[EncodedMethod, ...] = field(default_factory=tuple)

    def virtual_method_indices(self) -> list[int]:
        """Absolute ``method_ids`` indices of the virtual methods."""
        return accumulate_deltas(m.method_idx_diff for m in self.virtual_methods)


def accumulate_deltas(deltas: Iterable[int]) -> list[int]:
    """Resolve a delta-encoded index list.

    >>> accumulate_deltas([5, 3, 0])
    [5, 8, 8]
    """
    return list(accumulate(deltas))


def decode_class_data(cursor: ByteCursor, offset: int) -> ClassDataItem:
    """Decode the ``class_data_item`` at *offset*.

    *offset* must be a real class-data offset; classes without data carry
    ``None`` in :attr:`ClassDefItem.class_data_off` and are filtered out by
    the caller.

    Raises:
        OutOfBoundsError: The blob is truncated.
    """
    cursor.seek(offset)
    static_size = cursor.read_uleb128()
    instance_size = cursor.read_uleb128()
    direct_size = cursor.read_uleb128()
    virtual_size = cursor.read_uleb128()

    return ClassDataItem(
        static_fields=_read_fields(cursor, static_size),
        instance_fields=_read_fields(cursor, instance_size),
        direct_methods=_read_methods(cursor, direct_size),
        virtual_methods=_read_methods(cursor, virtual_size),
    )


def _read_fields(cursor: ByteCursor, count: int) -> tuple[EncodedField, ...]:
    return tuple(
        EncodedField(
            field_idx_diff=cursor.read_uleb128(),
            access_flags=cursor.read_uleb128(),
        )
        for _ in range(count)
    )


def _read_methods(cursor: ByteCursor, count: int) -> tuple[EncodedMethod, ...]:
    return tuple(
        EncodedMethod(
            method_idx_diff=cursor.read_uleb128(),
            access_flags=cursor.read_uleb128(),
            code_off=cursor.read_uleb128(),
        )
        for _ in range(count)
    )
