"""
Dex File Aggregate
===================

:class:`DexFile` owns one dex buffer together with its parsed tables and
answers the two questions the inheritance closure asks of every file:

* which of your classes directly extend one of these descriptors?
* what are the virtual method names of this class?

The dex format guarantees that, within one file, a class's superclass is
defined before the class itself.  A single in-order scan therefore finds
whole chains local to the file; chains crossing files are resolved by
:mod:`dexsift.core.closure`.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

from dexsift.core.formatting import Formatter, format_class_name
from dexsift.core.models import DexFileSummary
from dexsift.parsers.dex_parser import ClassDefItem, DexHeader, DexParser

TEST_METHOD_PREFIX: str = "test"


class DexFile:
    """A parsed dex file and the class/method queries over it.

    Usage::

        dex = DexFile.from_path("classes.dex")
        known = {"Ljunit/framework/TestCase;"}
        tests = dex.find_junit3_test_identifiers(known)

    Raises:
        DexFormatError: On construction, if the header or id tables are
            malformed or truncated.
    """

    def __init__(self, data: bytes, name: str = "<memory>") -> None:
        self._name = name
        self._parser = DexParser(data).parse()

    @classmethod
    def from_path(cls, path: str | Path) -> DexFile:
        path = Path(path)
        return cls(path.read_bytes(), name=str(path))

    def __repr__(self) -> str:
        return f"DexFile({self._name!r}, classes={len(self.class_defs)})"

    # ------------------------------------------------------------------ #
    #  Table access
    # ------------------------------------------------------------------ #

    @property
    def name(self) -> str:
        return self._name

    @property
    def header(self) -> DexHeader:
        return self._parser.header

    @property
    def class_defs(self) -> list[ClassDefItem]:
        return self._parser.class_defs

    def descriptor_of(self, class_def: ClassDefItem) -> str:
        """Descriptor of the class defined by *class_def*."""
        return self._parser.resolve_descriptor(class_def.class_idx)

    def class_descriptors(self) -> list[str]:
        """Descriptors of every class defined in this file, in order."""
        return [self.descriptor_of(class_def) for class_def in self.class_defs]

    def summary(self) -> DexFileSummary:
        h = self._parser.header
        return DexFileSummary(
            name=self._name,
            size=self._parser.size,
            version=h.version,
            sha256=hashlib.sha256(self._parser.cursor.data).hexdigest(),
            string_count=len(self._parser.string_ids),
            type_count=len(self._parser.type_ids),
            method_count=len(self._parser.method_ids),
            class_count=len(self._parser.class_defs),
        )

    # ------------------------------------------------------------------ #
    #  Queries
    # ------------------------------------------------------------------ #

    def find_classes_with_superclass(self, target_descriptors: set[str]) -> list[ClassDefItem]:
        """Return the classes whose direct superclass is in *target_descriptors*.

        Each match's own descriptor joins the target set, so a subclass
        declared later in the same file matches too.  The caller's set is
        updated once the scan has completed; if decoding fails half way it
        is left untouched.
        """
        matches: list[ClassDefItem] = []
        discovered: set[str] = set()

        for class_def in self.class_defs:
            if class_def.superclass_idx is None:
                continue
            superclass = self._parser.resolve_descriptor(class_def.superclass_idx)
            if superclass in target_descriptors or superclass in discovered:
                matches.append(class_def)
                discovered.add(self.descriptor_of(class_def))

        target_descriptors.update(discovered)
        return matches

    def method_names_of(self, class_def: ClassDefItem) -> list[str]:
        """Names of the virtual methods of *class_def*, in encoded order."""
        if class_def.class_data_off is None:
            return []
        class_data = self._parser.class_data(class_def)
        return [
            self._parser.method_name(method_idx)
            for method_idx in class_data.virtual_method_indices()
        ]

    def find_junit3_test_identifiers(
        self,
        target_descriptors: set[str],
        formatter: Formatter = format_class_name,
    ) -> list[str]:
        """Return ``<class><separator><method>`` for every JUnit3 test here.

        A test is a virtual method whose name starts with ``test``, declared
        by a class that extends a descriptor of *target_descriptors*.
        Newly matched class descriptors are added to *target_descriptors*,
        only after every identifier of this file has been produced.
        """
        scratch = set(target_descriptors)
        identifiers: list[str] = []

        for class_def in self.find_classes_with_superclass(scratch):
            class_name = formatter(self.descriptor_of(class_def))
            identifiers.extend(
                class_name + method
                for method in self.method_names_of(class_def)
                if method.startswith(TEST_METHOD_PREFIX)
            )

        target_descriptors.update(scratch)
        return identifiers
