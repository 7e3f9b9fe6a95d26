"""
Dex Loader
===========

Reads dex images from disk.  Accepts bare ``.dex`` files and APK/ZIP
archives; an archive contributes its ``classes.dex``, ``classes2.dex``, ...
entries in numeric order, which is the order the runtime loads them in.

The format is sniffed from the leading magic bytes rather than trusted
from the file extension.
"""

from __future__ import annotations

import re
import zipfile
import zlib
from pathlib import Path
from typing import Iterable, Iterator

from dexsift.core.dex_file import DexFile
from dexsift.parsers.dex_parser import DEX_MAGIC_PREFIX
from dexsift.parsers.errors import DexFormatError

ZIP_MAGIC: bytes = b"PK\x03\x04"

_CLASSES_DEX = re.compile(r"^classes(\d*)\.dex$")


def sniff_format(data: bytes) -> str:
    """Return ``"dex"``, ``"zip"`` or ``"unknown"`` from the magic bytes."""
    if data[:4] == DEX_MAGIC_PREFIX:
        return "dex"
    if data[:4] == ZIP_MAGIC:
        return "zip"
    return "unknown"


def dex_entry_names(names: Iterable[str]) -> list[str]:
    """Select and order the top-level ``classesN.dex`` entries of an archive.

    >>> dex_entry_names(["classes10.dex", "res/a.xml", "classes2.dex", "classes.dex"])
    ['classes.dex', 'classes2.dex', 'classes10.dex']
    """
    numbered: list[tuple[int, str]] = []
    for name in names:
        match = _CLASSES_DEX.match(name)
        if match:
            numbered.append((int(match.group(1) or 1), name))
    return [name for _, name in sorted(numbered)]


def iter_dex_buffers(path: str | Path, max_file_size: int) -> Iterator[tuple[str, bytes]]:
    """Yield ``(display_name, buffer)`` for every dex image under *path*.

    Raises:
        FileNotFoundError: *path* does not exist.
        DexFormatError: The file is too large, of an unknown format, a
            corrupt archive or an archive without dex entries.
    """
    path = Path(path)
    size = path.stat().st_size
    if size > max_file_size:
        raise DexFormatError(
            f"{path}: file too large ({size:,} bytes, max {max_file_size:,})"
        )

    data = path.read_bytes()
    kind = sniff_format(data)

    if kind == "dex":
        yield str(path), data
        return

    if kind == "zip":
        yield from _iter_archive(path)
        return

    raise DexFormatError(f"{path}: not a dex file or APK")


def _iter_archive(path: Path) -> Iterator[tuple[str, bytes]]:
    try:
        with zipfile.ZipFile(path) as archive:
            entries = dex_entry_names(archive.namelist())
            if not entries:
                raise DexFormatError(f"{path}: archive contains no classes.dex")
            for entry in entries:
                yield f"{path}!{entry}", archive.read(entry)
    except (zipfile.BadZipFile, zlib.error) as exc:
        raise DexFormatError(f"{path}: corrupt archive: {exc}") from exc


def load_dex_files(paths: Iterable[str | Path], max_file_size: int) -> list[DexFile]:
    """Parse every dex image under *paths*, preserving input order."""
    return [
        DexFile(data, name=name)
        for path in paths
        for name, data in iter_dex_buffers(path, max_file_size)
    ]
