"""
dexsift Console Output
=======================

Rich terminal display of a discovery result: the dex files read, the
test classes found with their test counts, and a summary line.
"""

from __future__ import annotations

from shared.console import SiftConsole

from dexsift.core.models import DiscoveryResult


class SiftConsoleOutput:
    """Renders a :class:`DiscoveryResult` on a :class:`SiftConsole`.

    Usage::

        SiftConsoleOutput().display(result)
    """

    def __init__(self, console: SiftConsole | None = None, show_tests: bool = False) -> None:
        """
        Args:
            console: Console to draw on; a new one is created if omitted.
            show_tests: Also list every test method under its class.
        """
        self._console: SiftConsole = console or SiftConsole()
        self._show_tests = show_tests

    def display(self, result: DiscoveryResult) -> None:
        self._console.section("dexsift -- JUnit3 Test Discovery")
        self.display_files(result)
        self.display_classes(result)
        if result.skipped:
            for name in result.skipped:
                self._console.warning(f"Skipped malformed file: {name}")
        self._console.blank()
        self._console.info(
            f"{result.test_count} test(s) in {len(result.tests_by_class())} class(es), "
            f"{result.passes} pass(es), {result.duration_seconds:.2f}s"
        )

    def display_files(self, result: DiscoveryResult) -> None:
        rows = [
            (
                f.name,
                f.version,
                f"{f.size:,}",
                f.class_count,
                f.method_count,
                f.sha256[:16],
            )
            for f in result.files
        ]
        self._console.table(
            "Dex Files",
            ["File", "Version", "Size", "Classes", "Methods", "SHA-256"],
            rows,
            styles=["bold", "", "", "bright_cyan", "bright_cyan", "dim"],
        )

    def display_classes(self, result: DiscoveryResult) -> None:
        grouped = result.tests_by_class()
        if not grouped:
            self._console.warning("No JUnit3 tests found.")
            return

        rows = []
        for class_name in sorted(grouped):
            methods = grouped[class_name]
            detail = ", ".join(methods) if self._show_tests else ""
            rows.append((class_name, len(methods), detail))

        columns = ["Test Class", "Tests"]
        if self._show_tests:
            columns.append("Methods")
            self._console.table("Test Classes", columns, rows)
        else:
            self._console.table("Test Classes", columns, [row[:2] for row in rows])
