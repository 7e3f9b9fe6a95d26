"""
Cross-File Inheritance Closure
===============================

Finds every JUnit3 test in a collection of dex files.

A test class is any class that transitively extends one of the built-in
JUnit3 base classes.  Within one dex file superclasses precede subclasses,
so a single scan of a file resolves chains local to it.  Across files no
ordering exists: an APK's ``classes2.dex`` may hold the base class of a
test in ``classes.dex`` and vice versa, and the chain may bounce between
files several times.

The closure therefore runs in passes.  Each pass scans every remaining
file in the caller's order, sharing one descriptor set that only grows, so
later files in the same pass already see what earlier files contributed.
Passes repeat until one adds no new descriptor.

This departs from the older schedule of dropping the last file after every
pass: that schedule loses a chain whose link sits in a file dropped before
the link below it was found.  Since each non-final pass discovers at least
one new test class, the number of passes is bounded by the number of test
classes plus one, and the work per pass is linear in the number of classes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from shared.logger import SiftLogger

from dexsift.core.dex_file import DexFile
from dexsift.core.formatting import Formatter, format_class_name
from dexsift.parsers.errors import DexFormatError


# All of the classes in the Android SDK that extend JUnit3's TestCase.
# They are not packaged into the APK under test, so they are the roots.
DEFAULT_DESCRIPTORS: frozenset[str] = frozenset({
    "Ljunit/framework/TestCase;",
    "Landroid/test/ActivityInstrumentationTestCase;",
    "Landroid/test/ActivityInstrumentationTestCase2;",
    "Landroid/test/ActivityTestCase;",
    "Landroid/test/ActivityUnitTestCase;",
    "Landroid/test/AndroidTestCase;",
    "Landroid/test/ApplicationTestCase;",
    "Landroid/test/FailedToCreateTests;",
    "Landroid/test/InstrumentationTestCase;",
    "Landroid/test/LoaderTestCase;",
    "Landroid/test/ProviderTestCase;",
    "Landroid/test/ProviderTestCase2;",
    "Landroid/test/ServiceTestCase;",
    "Landroid/test/SingleLaunchActivityTestCase;",
    "Landroid/test/SyncBaseInstrumentation;",
})


@dataclass(slots=True)
class ClosureResult:
    """Outcome of :meth:`InheritanceClosure.run`.

    Attributes:
        tests: Test identifiers found.
        descriptors: Final descriptor set: the bases plus every test class.
        passes: Number of passes performed.
        skipped: Names of files dropped after a parse failure.
    """
    tests: set[str] = field(default_factory=set)
    descriptors: set[str] = field(default_factory=set)
    passes: int = 0
    skipped: list[str] = field(default_factory=list)


class InheritanceClosure:
    """Computes the JUnit3 tests of an ordered collection of dex files.

    Args:
        dex_files: Files to scan; their order is irrelevant to the result.
        base_descriptors: Root descriptors; defaults to :data:`DEFAULT_DESCRIPTORS`.
        formatter: Descriptor -> class-name-plus-separator conversion.
        strict: If ``True`` a malformed file aborts the run.  Otherwise it
            is logged, skipped for the rest of the run and reported in
            :attr:`ClosureResult.skipped`.
        logger: Optional logger.
    """

    def __init__(
        self,
        dex_files: Sequence[DexFile],
        base_descriptors: Iterable[str] = DEFAULT_DESCRIPTORS,
        *,
        formatter: Formatter = format_class_name,
        strict: bool = True,
        logger: Optional[SiftLogger] = None,
    ) -> None:
        self._dex_files: list[DexFile] = list(dex_files)
        self._base_descriptors: frozenset[str] = frozenset(base_descriptors)
        self._formatter = formatter
        self._strict = strict
        self._logger = logger or SiftLogger("closure", console_output=False)

    def run(self) -> ClosureResult:
        result = ClosureResult(descriptors=set(self._base_descriptors))
        working = list(self._dex_files)

        with self._logger.operation("closure"):
            while working:
                result.passes += 1
                known_before = len(result.descriptors)

                for dex_file in list(working):
                    try:
                        found = dex_file.find_junit3_test_identifiers(
                            result.descriptors, self._formatter,
                        )
                    except DexFormatError as exc:
                        if self._strict:
                            raise
                        self._logger.warning(
                            "Skipping %s: %s", dex_file.name, exc,
                        )
                        working.remove(dex_file)
                        result.skipped.append(dex_file.name)
                        continue
                    result.tests.update(found)

                added = len(result.descriptors) - known_before
                self._logger.debug(
                    "Pass %d: %d new test class(es), %d test(s) so far",
                    result.passes, added, len(result.tests),
                    files=len(working),
                )
                if added == 0:
                    break

        return result


def find_junit3_tests(
    dex_files: Sequence[DexFile],
    base_descriptors: Iterable[str] = DEFAULT_DESCRIPTORS,
    formatter: Formatter = format_class_name,
) -> set[str]:
    """Return the JUnit3 test identifiers of *dex_files*.

    Convenience wrapper around :class:`InheritanceClosure` in strict mode.
    """
    return InheritanceClosure(
        dex_files, base_descriptors, formatter=formatter,
    ).run().tests
