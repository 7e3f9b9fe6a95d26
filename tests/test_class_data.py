import pytest

from dexsift.parsers.byte_cursor import ByteCursor
from dexsift.parsers.class_data import (
    EncodedMethod,
    accumulate_deltas,
    decode_class_data,
)
from dexsift.parsers.errors import OutOfBoundsError

# 0 static, 0 instance, 0 direct, 3 virtual; deltas 5, 3, 0
VIRTUAL_ONLY = (
    b"\x00\x00\x00\x03"
    b"\x05\x01\x00"
    b"\x03\x01\x00"
    b"\x00\x01\x00"
)

# 1 static, 1 instance, 1 direct, 2 virtual
MIXED = (
    b"\x01\x01\x01\x02"
    b"\x03\x08"                    # static field 3, ACC_STATIC
    b"\x04\x02"                    # instance field 4, ACC_PRIVATE
    b"\x02\x81\x80\x04\x80\x02"    # direct method 2, ACC_PUBLIC|ACC_CONSTRUCTOR, code 0x100
    b"\x05\x01\x80\x04"            # virtual method 5, code 0x200
    b"\x03\x01\x00"                # virtual method 8, abstract
)


def test_accumulate_deltas():
    assert accumulate_deltas([5, 3, 0]) == [5, 8, 8]
    assert accumulate_deltas([7]) == [7]
    assert accumulate_deltas([]) == []


def test_virtual_method_deltas_are_cumulative():
    item = decode_class_data(ByteCursor(VIRTUAL_ONLY), 0)

    assert [m.method_idx_diff for m in item.virtual_methods] == [5, 3, 0]
    assert item.virtual_method_indices() == [5, 8, 8]


def test_fields_and_direct_methods_are_skipped_correctly():
    item = decode_class_data(ByteCursor(MIXED), 0)

    assert [f.field_idx_diff for f in item.static_fields] == [3]
    assert [f.field_idx_diff for f in item.instance_fields] == [4]
    assert item.direct_methods == (EncodedMethod(2, 0x10001, 0x100),)
    assert item.virtual_methods[0] == EncodedMethod(5, 0x1, 0x200)
    assert item.virtual_method_indices() == [5, 8]


def test_decodes_at_offset():
    padding = b"\xde\xad\xbe\xef"
    item = decode_class_data(ByteCursor(padding + VIRTUAL_ONLY), len(padding))
    assert item.virtual_method_indices() == [5, 8, 8]


def test_empty_class_data():
    item = decode_class_data(ByteCursor(b"\x00\x00\x00\x00"), 0)
    assert item.virtual_method_indices() == []


@pytest.mark.parametrize("cut", [1, 3, len(VIRTUAL_ONLY) - 2])
def test_truncated_class_data_raises(cut):
    with pytest.raises(OutOfBoundsError):
        decode_class_data(ByteCursor(VIRTUAL_ONLY[:-cut]), 0)
