import pytest

from dexsift.core.dex_file import DexFile
from dexsift.core.formatting import make_formatter
from dexsift.parsers.errors import OutOfBoundsError

from tests.dexbuilder import OBJECT, TEST_CASE, DexBuilder


def test_same_file_chain_found_in_one_scan():
    dex = DexFile(
        DexBuilder()
        .add_class("Lcom/example/BaseTest;", TEST_CASE)
        .add_class("Lcom/example/Helper;", OBJECT, ["testNotATest"])
        .add_class("Lcom/example/LeafTest;", "Lcom/example/BaseTest;", ["testLeaf"])
        .build()
    )
    targets = {TEST_CASE}

    matches = dex.find_classes_with_superclass(targets)

    assert [dex.descriptor_of(c) for c in matches] == [
        "Lcom/example/BaseTest;",
        "Lcom/example/LeafTest;",
    ]
    assert targets == {TEST_CASE, "Lcom/example/BaseTest;", "Lcom/example/LeafTest;"}


def test_class_without_superclass_never_matches():
    # A class literally named like a known base, but with no superclass
    dex = DexFile(DexBuilder().add_class(TEST_CASE, None, ["testRun"]).build())
    targets = {TEST_CASE}

    assert dex.find_classes_with_superclass(targets) == []
    assert dex.find_junit3_test_identifiers(targets) == []
    assert targets == {TEST_CASE}


def test_subclass_declared_before_superclass_needs_another_scan():
    dex = DexFile(
        DexBuilder()
        .add_class("LLeafTest;", "LBaseTest;")
        .add_class("LBaseTest;", TEST_CASE)
        .build()
    )
    targets = {TEST_CASE}

    assert [dex.descriptor_of(c) for c in dex.find_classes_with_superclass(targets)] == ["LBaseTest;"]
    assert [dex.descriptor_of(c) for c in dex.find_classes_with_superclass(targets)] == [
        "LLeafTest;",
        "LBaseTest;",
    ]


def test_method_names_of_returns_virtual_methods_in_order(simple_test_dex):
    (class_def,) = simple_test_dex.class_defs
    assert simple_test_dex.method_names_of(class_def) == ["setUp", "testA", "testB", "tearDown"]


def test_method_names_of_skips_fields_and_direct_methods():
    dex = DexFile(
        DexBuilder()
        .add_class(
            "LFooTest;",
            TEST_CASE,
            ["testOne", "testTwo"],
            ["<clinit>", "<init>", "testPrivateHelper"],
            static_fields=2,
            instance_fields=3,
        )
        .build()
    )
    (class_def,) = dex.class_defs
    assert dex.method_names_of(class_def) == ["testOne", "testTwo"]


def test_method_names_of_class_without_data_is_empty():
    dex = DexFile(DexBuilder().add_class("LEmptyTest;", TEST_CASE, has_data=False).build())
    (class_def,) = dex.class_defs
    assert dex.method_names_of(class_def) == []


def test_only_test_prefixed_methods_become_identifiers(simple_test_dex):
    assert sorted(simple_test_dex.find_junit3_test_identifiers({TEST_CASE})) == [
        "com.example.FooTest#testA",
        "com.example.FooTest#testB",
    ]


def test_identifier_concatenates_formatter_output_and_method_name():
    dex = DexFile(DexBuilder().add_class("Lcom/example/Foo;", TEST_CASE, ["testBar"]).build())

    assert dex.find_junit3_test_identifiers({TEST_CASE}) == ["com.example.Foo#testBar"]
    assert dex.find_junit3_test_identifiers({TEST_CASE}, make_formatter(".")) == [
        "com.example.Foo.testBar"
    ]


def test_identifiers_grow_the_descriptor_set(simple_test_dex):
    targets = {TEST_CASE}
    simple_test_dex.find_junit3_test_identifiers(targets)
    assert "Lcom/example/FooTest;" in targets


def test_failed_scan_leaves_descriptors_untouched():
    data = DexBuilder().add_class("Lcom/example/ATest;", TEST_CASE, ["testA"]).build()
    # The class data blob is the last item in the file
    dex = DexFile(data[:-1])
    targets = {TEST_CASE}

    with pytest.raises(OutOfBoundsError):
        dex.find_junit3_test_identifiers(targets)
    assert targets == {TEST_CASE}


def test_summary(simple_test_dex):
    summary = simple_test_dex.summary()

    assert summary.name == "simple.dex"
    assert summary.version == "035"
    assert summary.class_count == 1
    assert summary.method_count == 5
    assert len(summary.sha256) == 64
    assert simple_test_dex.class_descriptors() == ["Lcom/example/FooTest;"]
