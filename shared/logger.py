"""
dexsift Structured Logger
==========================

:class:`SiftLogger` wraps a stdlib :class:`logging.Logger` with a Rich
console handler and an optional rotating file handler that can emit JSON
lines.  Records carry the component name and, while an ``operation()``
context is active, the current operation (``load``, ``closure`` ...).

References:
    - Python logging HOWTO. https://docs.python.org/3/howto/logging.html
    - Rich library. https://github.com/Textualize/rich
"""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

_LOG_THEME = Theme(
    {
        "log.level.debug": "dim cyan",
        "log.level.info": "bold bright_blue",
        "log.level.warning": "bold yellow",
        "log.level.error": "bold red",
        "log.level.critical": "bold white on red",
    }
)

_STANDARD_KWARGS = frozenset({"exc_info", "stack_info", "stacklevel"})


class _JSONFormatter(logging.Formatter):
    """One JSON object per record::

        {"timestamp": "...", "level": "INFO", "logger": "dexsift.engine",
         "message": "...", "component": "engine", "operation": "closure",
         "extra": {"passes": 2}}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for attr in ("component", "operation"):
            val = getattr(record, attr, None)
            if val is not None:
                entry[attr] = val

        extra = getattr(record, "sift_extra", None)
        if extra is not None:
            entry["extra"] = extra

        if record.exc_info and record.exc_info[1] is not None:
            entry["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


class SiftLogger:
    """Context-aware logger bound to one dexsift component.

    Usage::

        log = SiftLogger("engine", log_file="dexsift.log", json_logs=True)
        with log.operation("closure"):
            log.debug("pass %d", 1, files=3)
        with log.timed("discovery"):
            ...

    Keyword arguments other than the stdlib ones (``exc_info`` ...) are
    collected into the record's ``extra`` payload.

    Args:
        component:      Component name; the stdlib logger is ``dexsift.<component>``.
        log_level:      Minimum severity name.
        log_file:       Rotating log file path, ``None`` to disable.
        json_logs:      Emit JSON lines to the file handler.
        max_bytes:      Rotation size of the log file.
        backup_count:   Rotated files to keep.
        console_output: Attach the Rich stderr handler.
    """

    def __init__(
        self,
        component: str,
        *,
        log_level: str = "INFO",
        log_file: str | Path | None = None,
        json_logs: bool = False,
        max_bytes: int = 10_485_760,
        backup_count: int = 5,
        console_output: bool = True,
    ) -> None:
        self._component = component
        self._operation: str | None = None
        level = getattr(logging, log_level.upper(), logging.INFO)

        self._logger = logging.getLogger(f"dexsift.{component}")
        self._logger.setLevel(level)
        self._logger.propagate = False
        self._logger.handlers.clear()

        if console_output:
            handler = RichHandler(
                console=Console(theme=_LOG_THEME, stderr=True),
                level=level,
                show_path=False,
                rich_tracebacks=True,
                markup=False,
            )
            self._logger.addHandler(handler)

        if log_file is not None:
            file_path = Path(log_file)
            file_path.parent.mkdir(parents=True, exist_ok=True)
            fh = RotatingFileHandler(
                filename=str(file_path),
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            fh.setLevel(level)
            if json_logs:
                fh.setFormatter(_JSONFormatter())
            else:
                fh.setFormatter(logging.Formatter(
                    fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                    datefmt="%Y-%m-%dT%H:%M:%S%z",
                ))
            self._logger.addHandler(fh)

    # ------------------------------------------------------------------ #
    #  Context managers
    # ------------------------------------------------------------------ #

    class _OperationContext:
        """Temporarily binds an operation name."""

        def __init__(self, parent: SiftLogger, operation: str) -> None:
            self._parent = parent
            self._operation = operation
            self._prev: str | None = None

        def __enter__(self) -> SiftLogger:
            self._prev = self._parent._operation
            self._parent._operation = self._operation
            return self._parent

        def __exit__(self, *exc: Any) -> None:
            self._parent._operation = self._prev

    def operation(self, name: str) -> _OperationContext:
        """Stamp every record logged inside the block with ``operation=name``."""
        return self._OperationContext(self, name)

    class _TimingContext:
        """Logs start and completion time of a block."""

        def __init__(self, parent: SiftLogger, label: str) -> None:
            self._parent = parent
            self._label = label
            self._start: float = 0.0

        def __enter__(self) -> SiftLogger._TimingContext:
            self._start = time.perf_counter()
            self._parent.debug("Started: %s", self._label)
            return self

        def __exit__(self, *exc: Any) -> None:
            self._parent.debug("Completed: %s (%.3f sec)", self._label, self.elapsed)

        @property
        def elapsed(self) -> float:
            return time.perf_counter() - self._start

    def timed(self, label: str) -> _TimingContext:
        return self._TimingContext(self, label)

    # ------------------------------------------------------------------ #
    #  Log methods
    # ------------------------------------------------------------------ #

    def _enrich(self, kwargs: dict[str, Any]) -> dict[str, Any]:
        extra = kwargs.pop("extra", None) or {}
        payload = {k: kwargs.pop(k) for k in list(kwargs) if k not in _STANDARD_KWARGS}
        extra["component"] = self._component
        extra["operation"] = self._operation
        if payload:
            extra["sift_extra"] = payload
        kwargs["extra"] = extra
        return kwargs

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.debug(msg, *args, **self._enrich(kwargs))

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.info(msg, *args, **self._enrich(kwargs))

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.warning(msg, *args, **self._enrich(kwargs))

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.error(msg, *args, **self._enrich(kwargs))

    def exception(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log at ERROR level with the active exception's traceback."""
        kwargs.setdefault("exc_info", True)
        self._logger.error(msg, *args, **self._enrich(kwargs))

    # ------------------------------------------------------------------ #
    #  Properties
    # ------------------------------------------------------------------ #

    @property
    def component(self) -> str:
        return self._component

    @property
    def operation_name(self) -> str | None:
        return self._operation

    @property
    def underlying(self) -> logging.Logger:
        """Direct access to the stdlib :class:`logging.Logger`."""
        return self._logger
