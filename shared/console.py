"""
dexsift Console Interface
==========================

Rich-powered console abstraction giving every dexsift command the same
look: section rules, severity-coloured messages, tables and a status
spinner.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Generator, Sequence

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

_SIFT_THEME = Theme(
    {
        "sift.section": "bold bright_magenta",
        "sift.success": "bold green",
        "sift.warning": "bold yellow",
        "sift.error": "bold red",
        "sift.info": "bold bright_blue",
        "sift.dim": "dim white",
    }
)


class SiftConsole:
    """Unified console for dexsift output.

    Usage::

        con = SiftConsole()
        con.section("Discovered Tests")
        con.success("42 tests written to AllTests.txt")
    """

    def __init__(self, *, quiet: bool = False, record: bool = False, stderr: bool = False) -> None:
        """Initialise the console.

        Args:
            quiet:  Suppress all output.
            record: Enable Rich recording, used by tests to inspect output.
            stderr: Write to stderr, keeping stdout free for ``--json``.
        """
        self._console = Console(
            theme=_SIFT_THEME,
            quiet=quiet,
            record=record,
            stderr=stderr,
            highlight=False,
        )

    @property
    def rich(self) -> Console:
        """Direct access to the underlying Rich Console instance."""
        return self._console

    def section(self, title: str) -> None:
        self._console.rule(f"  {title}  ", style="sift.section", characters="─")
        self._console.print()

    # ------------------------------------------------------------------ #
    #  Message helpers
    # ------------------------------------------------------------------ #

    def success(self, message: str) -> None:
        self._console.print(f"[sift.success][✔] SUCCESS:[/sift.success] {message}")

    def warning(self, message: str) -> None:
        self._console.print(f"[sift.warning][⚠] WARNING:[/sift.warning] {message}")

    def error(self, message: str) -> None:
        self._console.print(f"[sift.error][✘] ERROR:[/sift.error] {message}")

    def info(self, message: str) -> None:
        self._console.print(f"[sift.info][ℹ] INFO:[/sift.info] {message}")

    # ------------------------------------------------------------------ #
    #  Tables
    # ------------------------------------------------------------------ #

    def table(
        self,
        title: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        *,
        caption: str | None = None,
        styles: Sequence[str] | None = None,
    ) -> None:
        """Render a styled Rich table; every cell is stringified."""
        tbl = Table(
            title=title,
            caption=caption,
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            padding=(0, 1),
        )
        for idx, col_name in enumerate(columns):
            style = styles[idx] if styles and idx < len(styles) else ""
            tbl.add_column(col_name, style=style)

        for row in rows:
            tbl.add_row(*(str(cell) for cell in row))

        self._console.print(tbl)

    @contextmanager
    def status(self, message: str = "Working...") -> Generator[Any, None, None]:
        """Spinner shown while the block runs."""
        with self._console.status(
            f"[sift.info]{message}[/sift.info]",
            spinner="dots",
            spinner_style="bright_cyan",
        ) as status_obj:
            yield status_obj

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Proxy to :meth:`rich.console.Console.print`."""
        self._console.print(*args, **kwargs)

    def blank(self, count: int = 1) -> None:
        for _ in range(count):
            self._console.print()

    def export_text(self) -> str:
        """Recorded output as plain text (requires ``record=True``)."""
        return self._console.export_text()
