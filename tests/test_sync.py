"""
Tests for the sync engine and staging area.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from genprotos.core.models.settings import SyncMode
from genprotos.core.services.staging import staging_area
from genprotos.core.services.sync import sync_output, unified_diff


def _write(root: Path, rel: str, text: str) -> None:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)


@pytest.fixture
def trees(tmp_path: Path) -> tuple[Path, Path]:
    dst = tmp_path / "dst"
    staging = tmp_path / "staging"
    dst.mkdir()
    staging.mkdir()
    return dst, staging


class TestUnifiedDiff:
    def test_equal_is_empty(self):
        assert unified_diff(b"same\n", b"same\n", "a/x", "b/x") == ""

    def test_labels_and_hunk(self):
        diff = unified_diff(b"one\ntwo\n", b"one\nthree\n", "a/x.go", "b/x.go")
        assert diff.startswith("--- a/x.go\n+++ b/x.go\n")
        assert "-two\n" in diff
        assert "+three\n" in diff

    def test_missing_file_is_empty(self):
        diff = unified_diff(b"", b"package x\n", "a/x.go", "b/x.go")
        assert "+package x\n" in diff

    def test_no_trailing_newline(self):
        diff = unified_diff(b"a\n", b"a\nb", "a/x", "b/x")
        assert diff.endswith("+b\n\\ No newline at end of file\n")

    def test_invalid_utf8_bytes_differ(self):
        diff = unified_diff(b"x = \xff\n", b"x = \xfe\n", "a/x.go", "b/x.go")
        assert "-x = \\xff\n" in diff
        assert "+x = \\xfe\n" in diff

    def test_same_text_different_bytes(self):
        # a literal backslash escape and the raw byte render alike
        diff = unified_diff(b"\\xff\n", b"\xff\n", "a/x.go", "b/x.go")
        assert diff == "Binary files a/x.go and b/x.go differ\n"


class TestSyncOutput:
    def test_apply_then_diff_is_clean(self, trees):
        """A changed file is overwritten, and a later dry run prints nothing."""
        dst, staging = trees
        _write(dst, "x/y.go", "package y\nvar A = 1\n")
        _write(staging, "x/y.go", "package y\nvar A = 2\n")

        out: list[str] = []
        report = sync_output(dst, staging, SyncMode.APPLY, emit=out.append)
        assert report.applied == ["x/y.go"]
        assert out == ["# x/y.go\n"]
        assert (dst / "x/y.go").read_text() == "package y\nvar A = 2\n"

        out.clear()
        report = sync_output(dst, staging, SyncMode.DIFF, emit=out.append)
        assert report.clean
        assert report.unchanged == ["x/y.go"]
        assert out == []

    def test_diff_does_not_mutate(self, trees):
        dst, staging = trees
        _write(dst, "y.go", "old\n")
        _write(staging, "y.go", "new\n")

        out: list[str] = []
        report = sync_output(dst, staging, SyncMode.DIFF, emit=out.append)
        assert report.differing == ["y.go"]
        assert not report.clean
        assert (dst / "y.go").read_text() == "old\n"
        assert "--- a/y.go" in out[0]
        assert "+++ b/y.go" in out[0]

    def test_missing_destination(self, trees):
        dst, staging = trees
        _write(staging, "new/pkg.go", "package pkg\n")

        out: list[str] = []
        report = sync_output(dst, staging, SyncMode.DIFF, emit=out.append)
        assert report.differing == ["new/pkg.go"]
        assert "+package pkg\n" in out[0]
        assert not (dst / "new").exists()

    def test_apply_is_idempotent(self, trees):
        dst, staging = trees
        _write(staging, "a.go", "package a\n")
        _write(staging, "b/b.go.meta", "meta\n")

        first = sync_output(dst, staging, SyncMode.APPLY)
        snapshot = {p: p.read_bytes() for p in dst.rglob("*") if p.is_file()}
        second = sync_output(dst, staging, SyncMode.APPLY)

        assert first.applied == second.applied == ["a.go", "b/b.go.meta"]
        assert {p: p.read_bytes() for p in dst.rglob("*") if p.is_file()} == snapshot

    def test_suffix_filter(self, trees):
        dst, staging = trees
        _write(staging, "keep.go", "package k\n")
        _write(staging, "notes.txt", "ignored\n")

        report = sync_output(dst, staging, SyncMode.APPLY)
        assert report.applied == ["keep.go"]
        assert not (dst / "notes.txt").exists()

    def test_sorted_walk(self, trees):
        dst, staging = trees
        for rel in ("z.go", "a/b.go", "m.go", "a/a.go"):
            _write(staging, rel, "x\n")
        report = sync_output(dst, staging, SyncMode.DIFF)
        assert report.differing == ["a/a.go", "a/b.go", "m.go", "z.go"]

    def test_invalid_utf8_reported_as_differing(self, trees):
        dst, staging = trees
        (dst / "x.go").write_bytes(b"x = \xff\n")
        (staging / "x.go").write_bytes(b"x = \xfe\n")

        out: list[str] = []
        report = sync_output(dst, staging, SyncMode.DIFF, emit=out.append)
        assert report.differing == ["x.go"]
        assert report.unchanged == []
        assert out

        sync_output(dst, staging, SyncMode.APPLY)
        assert sync_output(dst, staging, SyncMode.DIFF).clean

    def test_directory_sorts_with_sibling_files(self, trees):
        dst, staging = trees
        for rel in ("a.go", "a/x.go", "b.go"):
            _write(staging, rel, "x\n")
        report = sync_output(dst, staging, SyncMode.APPLY)
        assert report.applied == ["a/x.go", "a.go", "b.go"]

    def test_missing_staging_root(self, trees):
        dst, staging = trees
        report = sync_output(dst, staging / "absent", SyncMode.APPLY)
        assert report.total == 0

    def test_report_to_dict(self, trees):
        dst, staging = trees
        _write(staging, "a.go", "x\n")
        data = sync_output(dst, staging, SyncMode.APPLY).to_dict()
        assert data == {"mode": "apply", "applied": ["a.go"], "differing": [], "unchanged": []}


class TestStagingArea:
    def test_created_under_parent_and_removed(self, tmp_path: Path):
        with staging_area(tmp_path) as staging:
            assert staging.parent == tmp_path
            assert staging.name.startswith("tmp")
            (staging / "f.go").write_text("x")
        assert not staging.exists()

    def test_removed_on_failure(self, tmp_path: Path):
        with pytest.raises(RuntimeError):
            with staging_area(tmp_path) as staging:
                (staging / "f.go").write_text("x")
                raise RuntimeError("boom")
        assert not staging.exists()
