"""
Filesystem primitives — copying and walking generated files.

These are the only functions that write generated content to disk.
Errors are not caught: a permission problem or a vanished file aborts
the run.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path

logger = logging.getLogger(__name__)


def copy_file(src: Path, dst: Path) -> None:
    """Copy ``src`` over ``dst`` byte-for-byte, creating parent directories."""
    data = src.read_bytes()
    dst.parent.mkdir(parents=True, exist_ok=True)
    dst.write_bytes(data)
    logger.debug("Copied %s → %s (%d bytes)", src, dst, len(data))


def write_file(dst: Path, data: bytes) -> None:
    """Write ``data`` to ``dst``, creating parent directories."""
    dst.parent.mkdir(parents=True, exist_ok=True)
    dst.write_bytes(data)


def read_or_empty(path: Path) -> bytes:
    """File contents, or ``b""`` when the file does not exist."""
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return b""


def walk_files(root: Path, suffixes: tuple[str, ...] | None = None) -> Iterator[Path]:
    """Yield files under ``root`` recursively, in lexical path order.

    Entries of a directory are ordered by name whether they are files
    or subdirectories, so ``a/b.go`` comes before ``m.go``.

    Args:
        root:     Directory to walk.  A missing directory yields nothing.
        suffixes: Only yield names ending with one of these.
    """
    found: list[Path] = []
    for dirpath, _dirnames, filenames in os.walk(root):
        for name in filenames:
            if suffixes is None or name.endswith(suffixes):
                found.append(Path(dirpath) / name)
    yield from sorted(found, key=lambda p: p.relative_to(root).parts)

