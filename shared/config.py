"""
dexsift Configuration Management
=================================

Dataclass-based configuration with TOML persistence.

Example ``dexsift.toml``::

    [global]
    log_level = "DEBUG"
    output_dir = "build/tests"

    [sift]
    separator = "#"
    extra_descriptors = ["Lcom/example/BaseTestCase;"]
    strict = true

References:
    - TOML v1.0.0 Specification. https://toml.io/en/v1.0.0
"""

from __future__ import annotations

import sys
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


# ---------------------------------------------------------------------------
# Default configuration file, looked up in the current working directory
# ---------------------------------------------------------------------------
_DEFAULT_CONFIG_PATH: Path = Path("dexsift.toml")


@dataclass(frozen=False, slots=True)
class SiftConfig:
    """Settings of the test discovery run.

    Attributes:
        separator: Placed between the dotted class name and the method name.
        extra_descriptors: Additional root base classes, as descriptors or
            dotted names, for projects with their own JUnit3 base outside
            the scanned files.
        strict: Abort on the first malformed dex file instead of skipping it.
        max_file_size: Largest dex or APK file accepted, in bytes.
        test_list_name: File name of the plain-text test list.
    """

    separator: str = "#"
    extra_descriptors: list[str] = field(default_factory=list)
    strict: bool = True
    max_file_size: int = 268_435_456  # 256 MiB
    test_list_name: str = "AllTests.txt"


@dataclass(frozen=False, slots=True)
class GlobalConfig:
    """Logging and output settings."""

    log_level: str = "INFO"
    log_file: str = ""
    log_json: bool = False
    output_dir: str = "."
    version: str = "1.0.0"


@dataclass(frozen=False, slots=True)
class DexSiftConfig:
    """Master configuration.

    Usage:
        >>> config = DexSiftConfig.load()                  # ./dexsift.toml, if present
        >>> config = DexSiftConfig.load("custom.toml")
        >>> config.sift.separator
        '#'
    """

    global_settings: GlobalConfig = field(default_factory=GlobalConfig)
    sift: SiftConfig = field(default_factory=SiftConfig)

    @classmethod
    def load(cls, path: str | Path | None = None) -> DexSiftConfig:
        """Load configuration from a TOML file.

        Missing keys fall back to dataclass defaults and unknown keys are
        ignored.

        Raises:
            FileNotFoundError: If *path* was given explicitly and does not exist.
            ValueError: If the separator is empty.
        """
        config_path = Path(path) if path is not None else _DEFAULT_CONFIG_PATH

        if not config_path.exists():
            if path is not None:
                raise FileNotFoundError(
                    f"Configuration file not found: {config_path}"
                )
            return cls()

        with open(config_path, "rb") as fh:
            raw: dict[str, Any] = tomllib.load(fh)

        sift = cls._build_section(SiftConfig, raw.get("sift", {}))
        if not sift.separator:
            raise ValueError(f"{config_path}: [sift] separator must not be empty")

        return cls(
            global_settings=cls._build_section(GlobalConfig, raw.get("global", {})),
            sift=sift,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @staticmethod
    def _build_section(cls: type, data: dict[str, Any]) -> Any:
        """Instantiate dataclass *cls* from the keys it declares."""
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}  # type: ignore[attr-defined]
        return cls(**{k: v for k, v in data.items() if k in valid_keys})
