"""
dexsift Data Models
====================

Pydantic models describing the outcome of a test discovery run: which dex
files were read, which classes were recognised as JUnit3 test classes and
the resulting test identifiers.
"""

from __future__ import annotations

from collections import defaultdict

from pydantic import BaseModel, Field


class DexFileSummary(BaseModel):
    """Metadata about one loaded dex file.

    Attributes:
        name: Display name (path, or ``archive.apk!classes2.dex``).
        size: Buffer size in bytes.
        version: Dex format version string (``"035"`` ...).
        sha256: SHA-256 of the buffer.
        string_count: Entries in the string_ids table.
        type_count: Entries in the type_ids table.
        method_count: Entries in the method_ids table.
        class_count: Entries in the class_defs table.
    """
    name: str = ""
    size: int = 0
    version: str = ""
    sha256: str = ""
    string_count: int = 0
    type_count: int = 0
    method_count: int = 0
    class_count: int = 0


class DiscoveryResult(BaseModel):
    """Complete result of a discovery run.

    Attributes:
        tests: Sorted test identifiers (``com.example.FooTest#testBar``).
        files: Summaries of every loaded dex file, in processing order.
        test_base_descriptors: Descriptors of the classes found to extend a
            JUnit3 base class (the built-in bases excluded), sorted.
        passes: Number of closure passes performed.
        skipped: Names of files excluded because they failed to parse.
        separator: Separator between class and method name.
        duration_seconds: Wall-clock duration of the run.
    """
    tests: list[str] = Field(default_factory=list)
    files: list[DexFileSummary] = Field(default_factory=list)
    test_base_descriptors: list[str] = Field(default_factory=list)
    passes: int = 0
    skipped: list[str] = Field(default_factory=list)
    separator: str = Field(default="#", min_length=1)
    duration_seconds: float = Field(default=0.0, ge=0.0)

    @property
    def test_count(self) -> int:
        return len(self.tests)

    def tests_by_class(self) -> dict[str, list[str]]:
        """Group test method names under their class name."""
        grouped: dict[str, list[str]] = defaultdict(list)
        for identifier in self.tests:
            class_name, _, method = identifier.rpartition(self.separator)
            grouped[class_name].append(method)
        return dict(grouped)
