"""
dexsift Discovery Engine
=========================

Orchestrates a discovery run:

    1. Load every dex image from the given paths (bare dex or APK)
    2. Run the cross-file inheritance closure
    3. Assemble a :class:`DiscoveryResult`

In strict mode (the default) the first malformed file aborts the run with
:class:`~dexsift.parsers.errors.DexFormatError`.  In lenient mode such a
file is logged and reported in :attr:`DiscoveryResult.skipped`; the
closure never sees partial state from it.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Iterable, Sequence

from shared.config import DexSiftConfig
from shared.logger import SiftLogger

from dexsift.core.closure import DEFAULT_DESCRIPTORS, InheritanceClosure
from dexsift.core.dex_file import DexFile
from dexsift.core.formatting import make_formatter, to_descriptor
from dexsift.core.loader import iter_dex_buffers
from dexsift.core.models import DiscoveryResult
from dexsift.parsers.errors import DexFormatError


class SiftEngine:
    """Runs JUnit3 test discovery over dex files and APKs.

    Usage::

        engine = SiftEngine()
        result = engine.discover(["app-debug-androidTest.apk"])
        for test in result.tests:
            print(test)
    """

    def __init__(
        self,
        config: DexSiftConfig | None = None,
        logger: SiftLogger | None = None,
    ) -> None:
        self._config: DexSiftConfig = config or DexSiftConfig()
        if not self._config.sift.separator:
            raise ValueError("separator must not be empty")
        self._logger: SiftLogger = logger or SiftLogger("engine")

    @property
    def base_descriptors(self) -> frozenset[str]:
        """Built-in JUnit3 roots plus the configured extra base classes."""
        extra = {to_descriptor(name) for name in self._config.sift.extra_descriptors}
        return DEFAULT_DESCRIPTORS | extra

    # ------------------------------------------------------------------ #
    #  Entry points
    # ------------------------------------------------------------------ #

    def discover(self, paths: Iterable[str | Path]) -> DiscoveryResult:
        """Discover the tests of the dex files and APKs at *paths*."""
        started = time.perf_counter()
        skipped: list[str] = []
        dex_files: list[DexFile] = []

        with self._logger.operation("load"):
            for path in paths:
                # An APK contributes all of its dex entries or none of them
                loaded: list[DexFile] = []
                try:
                    for name, data in iter_dex_buffers(path, self._config.sift.max_file_size):
                        loaded.append(DexFile(data, name=name))
                        self._logger.debug("Loaded %s", name, size=len(data))
                except DexFormatError as exc:
                    if self._config.sift.strict:
                        raise
                    self._logger.warning("Skipping %s: %s", path, exc)
                    skipped.append(str(path))
                    continue
                dex_files.extend(loaded)

        result = self._run(dex_files, started)
        result.skipped[:0] = skipped
        return result

    def discover_data(self, buffers: Sequence[bytes]) -> DiscoveryResult:
        """Discover the tests of in-memory dex buffers.

        Buffers are named ``<memory:N>``; parse failures follow the
        configured strictness like on-disk files.
        """
        started = time.perf_counter()
        skipped: list[str] = []
        dex_files: list[DexFile] = []

        for i, data in enumerate(buffers):
            name = f"<memory:{i}>"
            try:
                dex_files.append(DexFile(data, name=name))
            except DexFormatError as exc:
                if self._config.sift.strict:
                    raise
                self._logger.warning("Skipping %s: %s", name, exc)
                skipped.append(name)

        result = self._run(dex_files, started)
        result.skipped[:0] = skipped
        return result

    # ------------------------------------------------------------------ #
    #  Pipeline
    # ------------------------------------------------------------------ #

    def _run(self, dex_files: list[DexFile], started: float) -> DiscoveryResult:
        sift = self._config.sift
        bases = self.base_descriptors

        closure = InheritanceClosure(
            dex_files,
            bases,
            formatter=make_formatter(sift.separator),
            strict=sift.strict,
            logger=self._logger,
        )
        with self._logger.timed("inheritance closure"):
            outcome = closure.run()

        result = DiscoveryResult(
            tests=sorted(outcome.tests),
            files=[dex_file.summary() for dex_file in dex_files],
            test_base_descriptors=sorted(outcome.descriptors - bases),
            passes=outcome.passes,
            skipped=list(outcome.skipped),
            separator=sift.separator,
            duration_seconds=time.perf_counter() - started,
        )
        self._logger.info(
            "Found %d test(s) in %d test class(es) across %d dex file(s), %d pass(es)",
            result.test_count,
            len(result.test_base_descriptors),
            len(dex_files),
            result.passes,
        )
        return result
