"""
Sync engine — reconcile a staging directory with the repository.

Two policies, fixed for the whole run:

    DIFF   print a unified diff per differing file, mutate nothing
    APPLY  overwrite each destination file with its staged content

APPLY is idempotent: staging the same content twice writes the same
bytes and reports the same paths.
"""

from __future__ import annotations

import difflib
import logging
from collections.abc import Callable
from pathlib import Path

from genprotos.adapters.shell.filesystem import copy_file, read_or_empty, walk_files
from genprotos.core.models.settings import SyncMode
from genprotos.core.models.sync import SyncReport

logger = logging.getLogger(__name__)

Emit = Callable[[str], None]


def unified_diff(old: bytes, new: bytes, old_label: str, new_label: str) -> str:
    """Unified diff text between two file contents; empty only when equal.

    Invalid UTF-8 is shown as ``\\xNN`` escapes.  Contents that differ
    in bytes but render to the same text get a ``Binary files`` line,
    as ``diff -u`` prints.
    """
    if old == new:
        return ""
    old_lines = old.decode("utf-8", errors="backslashreplace").splitlines(keepends=True)
    new_lines = new.decode("utf-8", errors="backslashreplace").splitlines(keepends=True)
    out: list[str] = []
    for line in difflib.unified_diff(old_lines, new_lines, fromfile=old_label, tofile=new_label):
        out.append(line if line.endswith("\n") else line + "\n\\ No newline at end of file\n")
    if not out:
        return f"Binary files {old_label} and {new_label} differ\n"
    return "".join(out)


def sync_output(
    dst_root: Path,
    staging_root: Path,
    mode: SyncMode,
    suffixes: tuple[str, ...] = (".go", ".meta"),
    emit: Emit | None = None,
) -> SyncReport:
    """Reconcile every staged file under ``staging_root`` with ``dst_root``.

    Args:
        dst_root:     Destination tree (the repository root).
        staging_root: Directory whose layout mirrors ``dst_root``.
        mode:         DIFF or APPLY.
        suffixes:     Only staged files with these suffixes are considered.
        emit:         Receives report text (``# path`` lines or diffs).

    Returns:
        SyncReport of what was applied or differs.
    """
    report = SyncReport(mode=mode)

    for src_path in walk_files(staging_root, suffixes):
        rel = src_path.relative_to(staging_root).as_posix()
        dst_path = dst_root / rel

        if mode is SyncMode.APPLY:
            if emit:
                emit(f"# {rel}\n")
            copy_file(src_path, dst_path)
            report.applied.append(rel)
            continue

        diff = unified_diff(read_or_empty(dst_path), src_path.read_bytes(), f"a/{rel}", f"b/{rel}")
        if diff:
            report.differing.append(rel)
            if emit:
                emit(diff)
        else:
            report.unchanged.append(rel)

    logger.info(
        "Sync %s: %d applied, %d differing, %d unchanged",
        mode.value,
        len(report.applied),
        len(report.differing),
        len(report.unchanged),
    )
    return report
