"""
dexsift CLI
============

Click-based command line for JUnit3 test discovery.

Usage::

    # Print a summary and write AllTests.txt to the current directory
    dexsift app-debug-androidTest.apk

    # Several dex files, output to build/
    dexsift classes.dex classes2.dex --output-dir build/

    # Machine-readable output on stdout
    dexsift app.apk --json

    # A project-specific base class living in a library outside the APK
    dexsift app.apk --base-class com.example.testing.BaseTestCase

References:
    - Click documentation: https://click.palletsprojects.com/
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from shared.config import DexSiftConfig
from shared.console import SiftConsole
from shared.logger import SiftLogger

from dexsift.core.engine import SiftEngine
from dexsift.output.console import SiftConsoleOutput
from dexsift.output.report import SiftReportGenerator
from dexsift.parsers.errors import DexFormatError


@click.command("dexsift")
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output-dir", "-o",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory for the test list (default: from config, else '.').",
)
@click.option(
    "--json", "json_output",
    is_flag=True,
    default=False,
    help="Print the JSON report to stdout instead of writing the test list.",
)
@click.option(
    "--report",
    type=click.Path(dir_okay=False),
    default=None,
    help="Also write a JSON report to this path.",
)
@click.option(
    "--separator",
    default=None,
    help="Separator between class and method name (default '#').",
)
@click.option(
    "--base-class", "-b",
    "base_classes",
    multiple=True,
    help="Extra JUnit3 base class (dotted name or descriptor). Repeatable.",
)
@click.option(
    "--strict/--lenient",
    default=None,
    help="Abort on a malformed dex file, or skip it (default: strict).",
)
@click.option(
    "--show-tests",
    is_flag=True,
    default=False,
    help="List every test method in the console summary.",
)
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="TOML configuration file (default: ./dexsift.toml if present).",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
def dexsift_cli(
    paths: tuple[str, ...],
    output_dir: str | None,
    json_output: bool,
    report: str | None,
    separator: str | None,
    base_classes: tuple[str, ...],
    strict: bool | None,
    show_tests: bool,
    config_path: str | None,
    verbose: bool,
) -> None:
    """Find the JUnit3 tests in dex files and APKs.

    PATHS are dex files or APK archives; all of them are searched together,
    so a test class may extend a base class defined in another file.
    """
    console = SiftConsole(stderr=json_output)

    try:
        config = DexSiftConfig.load(config_path)
    except Exception as exc:
        console.error(f"Invalid configuration: {exc}")
        sys.exit(1)

    if separator is not None:
        if not separator:
            raise click.BadParameter("must not be empty", param_hint="'--separator'")
        config.sift.separator = separator
    if strict is not None:
        config.sift.strict = strict
    config.sift.extra_descriptors.extend(base_classes)

    settings = config.global_settings
    logger = SiftLogger(
        "cli",
        log_level="DEBUG" if verbose else settings.log_level,
        log_file=settings.log_file or None,
        json_logs=settings.log_json,
    )
    engine = SiftEngine(config=config, logger=logger)

    try:
        with console.status("Searching for JUnit3 tests..."):
            result = engine.discover(paths)
    except KeyboardInterrupt:
        console.warning("Discovery interrupted by user.")
        sys.exit(130)
    except (DexFormatError, OSError) as exc:
        console.error(f"Discovery failed: {exc}")
        if verbose:
            logger.exception("Discovery failed")
        sys.exit(1)

    reports = SiftReportGenerator()
    if report:
        console.success(f"JSON report saved: {reports.generate_json(result, report)}")

    if json_output:
        click.echo(json.dumps(reports.build_json(result), indent=2, ensure_ascii=False))
        return

    SiftConsoleOutput(console=console, show_tests=show_tests).display(result)

    target_dir = Path(output_dir or settings.output_dir)
    list_path = reports.write_test_list(result, target_dir / config.sift.test_list_name)
    console.success(f"Test list saved: {list_path}")


def main() -> None:
    """Entry point for the ``dexsift`` script and ``python -m dexsift``."""
    dexsift_cli()


if __name__ == "__main__":
    main()
