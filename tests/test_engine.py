import zipfile

import pytest

from shared.config import DexSiftConfig

from dexsift.core.engine import SiftEngine
from dexsift.core.loader import dex_entry_names, load_dex_files, sniff_format
from dexsift.parsers.errors import DexFormatError

from tests.dexbuilder import TEST_CASE, DexBuilder, single_class_dex


@pytest.fixture
def base_dex() -> bytes:
    return single_class_dex("Lcom/example/BaseTest;", TEST_CASE, ["testBase"])


@pytest.fixture
def leaf_dex() -> bytes:
    return single_class_dex("Lcom/example/LeafTest;", "Lcom/example/BaseTest;", ["testLeaf", "helper"])


@pytest.fixture
def engine(quiet_logger) -> SiftEngine:
    return SiftEngine(logger=quiet_logger)


def lenient_engine(quiet_logger) -> SiftEngine:
    config = DexSiftConfig()
    config.sift.strict = False
    return SiftEngine(config=config, logger=quiet_logger)


def test_sniff_format(base_dex):
    assert sniff_format(base_dex) == "dex"
    assert sniff_format(b"PK\x03\x04rest") == "zip"
    assert sniff_format(b"\x7fELF") == "unknown"


def test_dex_entry_names_are_numerically_ordered():
    names = ["classes10.dex", "AndroidManifest.xml", "classes2.dex", "lib/classes3.dex", "classes.dex"]
    assert dex_entry_names(names) == ["classes.dex", "classes2.dex", "classes10.dex"]


def test_discover_dex_files(tmp_path, engine, base_dex, leaf_dex):
    (tmp_path / "a.dex").write_bytes(leaf_dex)
    (tmp_path / "b.dex").write_bytes(base_dex)

    result = engine.discover([tmp_path / "a.dex", tmp_path / "b.dex"])

    assert result.tests == [
        "com.example.BaseTest#testBase",
        "com.example.LeafTest#testLeaf",
    ]
    assert [f.name for f in result.files] == [str(tmp_path / "a.dex"), str(tmp_path / "b.dex")]
    assert result.test_base_descriptors == ["Lcom/example/BaseTest;", "Lcom/example/LeafTest;"]
    assert result.skipped == []
    assert result.passes >= 2


def test_discover_apk(tmp_path, engine, base_dex, leaf_dex):
    apk = tmp_path / "app-androidTest.apk"
    with zipfile.ZipFile(apk, "w") as archive:
        archive.writestr("AndroidManifest.xml", b"\x03\x00\x08\x00")
        archive.writestr("classes2.dex", base_dex)
        archive.writestr("classes.dex", leaf_dex)

    result = engine.discover([apk])

    assert [f.name for f in result.files] == [f"{apk}!classes.dex", f"{apk}!classes2.dex"]
    assert result.tests_by_class() == {
        "com.example.BaseTest": ["testBase"],
        "com.example.LeafTest": ["testLeaf"],
    }


def test_apk_without_dex_is_rejected(tmp_path, engine):
    apk = tmp_path / "empty.apk"
    with zipfile.ZipFile(apk, "w") as archive:
        archive.writestr("AndroidManifest.xml", b"")

    with pytest.raises(DexFormatError):
        engine.discover([apk])


def test_unknown_format_strict_and_lenient(tmp_path, quiet_logger, engine, base_dex):
    junk = tmp_path / "junk.bin"
    junk.write_bytes(b"\x7fELF" + bytes(200))
    good = tmp_path / "good.dex"
    good.write_bytes(base_dex)

    with pytest.raises(DexFormatError):
        engine.discover([junk, good])

    result = lenient_engine(quiet_logger).discover([junk, good])
    assert result.skipped == [str(junk)]
    assert result.tests == ["com.example.BaseTest#testBase"]


def test_lenient_run_reports_file_broken_during_closure(quiet_logger, base_dex):
    broken = single_class_dex("LBrokenTest;", TEST_CASE, ["testX"])[:-1]

    result = lenient_engine(quiet_logger).discover_data([broken, base_dex])

    assert result.skipped == ["<memory:0>"]
    assert result.tests == ["com.example.BaseTest#testBase"]


def test_file_size_limit(tmp_path, quiet_logger, base_dex):
    path = tmp_path / "big.dex"
    path.write_bytes(base_dex)

    with pytest.raises(DexFormatError):
        load_dex_files([path], max_file_size=len(base_dex) - 1)
    assert len(load_dex_files([path], max_file_size=len(base_dex))) == 1


def test_extra_descriptors_and_separator(quiet_logger):
    config = DexSiftConfig()
    config.sift.extra_descriptors = ["com.example.testing.LibraryTestCase"]
    config.sift.separator = "::"
    data = single_class_dex("Lcom/example/LibTest;", "Lcom/example/testing/LibraryTestCase;", ["testLib"])

    result = SiftEngine(config=config, logger=quiet_logger).discover_data([data])

    assert result.tests == ["com.example.LibTest::testLib"]
    assert result.tests_by_class() == {"com.example.LibTest": ["testLib"]}


def test_discover_data_without_tests(engine):
    data = DexBuilder().add_class("Lcom/example/App;").build()
    result = engine.discover_data([data])

    assert result.tests == []
    assert result.test_count == 0
    assert result.files[0].name == "<memory:0>"


def test_corrupt_archive_is_a_format_error(tmp_path, quiet_logger, engine, base_dex):
    bad = tmp_path / "bad.apk"
    bad.write_bytes(b"PK\x03\x04" + b"\x00" * 64)
    good = tmp_path / "good.dex"
    good.write_bytes(base_dex)

    with pytest.raises(DexFormatError):
        engine.discover([good, bad])

    result = lenient_engine(quiet_logger).discover([good, bad])
    assert result.skipped == [str(bad)]
    assert result.tests == ["com.example.BaseTest#testBase"]


def test_apk_with_one_bad_entry_is_skipped_as_a_whole(tmp_path, quiet_logger, base_dex):
    apk = tmp_path / "app.apk"
    with zipfile.ZipFile(apk, "w") as archive:
        archive.writestr("classes.dex", single_class_dex("LFooTest;", TEST_CASE, ["testA"]))
        archive.writestr("classes2.dex", base_dex[:0x40])
    good = tmp_path / "good.dex"
    good.write_bytes(base_dex)

    result = lenient_engine(quiet_logger).discover([apk, good])

    assert result.skipped == [str(apk)]
    assert result.tests == ["com.example.BaseTest#testBase"]
    assert [f.name for f in result.files] == [str(good)]


def test_empty_separator_is_rejected(quiet_logger):
    config = DexSiftConfig()
    config.sift.separator = ""

    with pytest.raises(ValueError):
        SiftEngine(config=config, logger=quiet_logger)
