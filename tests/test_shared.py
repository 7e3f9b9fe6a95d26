import json

import pytest

from shared.config import DexSiftConfig
from shared.console import SiftConsole
from shared.logger import SiftLogger


def test_config_defaults():
    config = DexSiftConfig()

    assert config.sift.separator == "#"
    assert config.sift.strict is True
    assert config.sift.test_list_name == "AllTests.txt"
    assert config.global_settings.output_dir == "."


def test_config_load_from_toml(tmp_path):
    path = tmp_path / "dexsift.toml"
    path.write_text(
        "[global]\n"
        'log_level = "DEBUG"\n'
        "unknown_key = 1\n"
        "\n"
        "[sift]\n"
        'separator = "."\n'
        'extra_descriptors = ["Lcom/example/Base;"]\n'
        "strict = false\n",
        encoding="utf-8",
    )

    config = DexSiftConfig.load(path)

    assert config.global_settings.log_level == "DEBUG"
    assert config.sift.separator == "."
    assert config.sift.extra_descriptors == ["Lcom/example/Base;"]
    assert config.sift.strict is False
    assert config.sift.max_file_size == 268_435_456
    assert config.to_dict()["sift"]["separator"] == "."


def test_config_explicit_missing_path_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        DexSiftConfig.load(tmp_path / "missing.toml")


def test_config_default_path_is_optional(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert DexSiftConfig.load().sift.separator == "#"


def test_json_log_file(tmp_path):
    log_file = tmp_path / "logs" / "dexsift.log"
    logger = SiftLogger("closure", log_file=log_file, json_logs=True, console_output=False)

    with logger.operation("pass"):
        logger.info("Pass %d complete", 1, added=3)
    logger.warning("outside")
    for handler in logger.underlying.handlers:
        handler.flush()

    first, second = (json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines())
    assert first["message"] == "Pass 1 complete"
    assert first["logger"] == "dexsift.closure"
    assert first["component"] == "closure"
    assert first["operation"] == "pass"
    assert first["extra"] == {"added": 3}
    assert "operation" not in second
    assert logger.operation_name is None


def test_log_level_filters(tmp_path):
    log_file = tmp_path / "plain.log"
    logger = SiftLogger("engine", log_level="WARNING", log_file=log_file, console_output=False)

    logger.info("hidden")
    logger.error("shown")
    for handler in logger.underlying.handlers:
        handler.flush()

    text = log_file.read_text(encoding="utf-8")
    assert "shown" in text
    assert "hidden" not in text


def test_console_helpers():
    console = SiftConsole(record=True)
    console.section("Results")
    console.success("done")
    console.table("Numbers", ["Name", "Value"], [("one", 1), ("two", 2)])
    text = console.export_text()

    assert "Results" in text
    assert "SUCCESS: done" in text
    assert "Numbers" in text
    assert "two" in text


def test_config_empty_separator_is_rejected(tmp_path):
    path = tmp_path / "dexsift.toml"
    path.write_text('[sift]\nseparator = ""\n', encoding="utf-8")

    with pytest.raises(ValueError):
        DexSiftConfig.load(path)
