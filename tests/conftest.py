"""
Shared test fixtures — a fake repository, fake protoc, and settings.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable
from pathlib import Path

import pytest

from genprotos.adapters.shell.command import PLUGIN_ENV, Protoc
from genprotos.core.errors import ToolchainError
from genprotos.core.models.generation import (
    GenerationConfig,
    GenerationJob,
    PackageOverrides,
    Relocation,
    RemoteTarget,
)
from genprotos.core.models.settings import Settings, SyncMode

MODULE = "example.com/mod"

PREAMBLE = (
    "// Copyright 2019 Example Authors.",
    "",
    "// Code generated by generate-protos. DO NOT EDIT.",
    "",
)

LOCAL_PROTOS = [
    "cmd/gen/testdata/b/b.proto",
    "cmd/gen/testdata/a/a.proto",
    "cmd/gen/testdata/c/c.proto",
    "cmd/gen/testdata/annotations/annotations.proto",
    "cmd/gen/testdata/legacy/proto2_20190101_0123abcd/old.proto",
    "cmd/grpc/testdata/svc/svc.proto",
    "internal/testprotos/keep/keep.proto",
    "internal/testprotos/irregular/irregular.proto",
]

REMOTE_PROTOS = [
    "src/google/protobuf/any.proto",
    "src/google/protobuf/field_mask.proto",
    "benchmarks/benchmarks.proto",
]


class FakeProtoc:
    """Stands in for protoc plus the self-invoked plugin.

    Records each call and writes output the way protoc-gen-go would:
    next to the source with ``paths=source_relative``, otherwise under
    the import path from an ``M`` option (or ``example.com/ext/<dir>``).
    """

    def __init__(self) -> None:
        self.calls: list[dict] = []
        self.contents: dict[str, str] = {}
        self.fail_on: set[str] = set()

    def __call__(self, cmd, cwd=None, env=None, input=None) -> subprocess.CompletedProcess:
        proto = cmd[-1]
        out_arg = next(a for a in cmd if a.startswith("--go_out="))
        opts, _, out_dir = out_arg.removeprefix("--go_out=").partition(":")
        options = [o for o in opts.split(",") if o]
        call = {
            "cmd": list(cmd),
            "cwd": cwd,
            "proto": proto,
            "options": options,
            "plugins": env[PLUGIN_ENV],
            "includes": [a.removeprefix("-I") for a in cmd if a.startswith("-I")],
        }
        self.calls.append(call)
        if proto in self.fail_on:
            raise ToolchainError(list(cmd), output=f"{proto}: boom", returncode=1)

        base = Path(proto).name.removesuffix(".proto")
        if "paths=source_relative" in options:
            target = Path(out_dir) / proto.removesuffix(".proto")
            target = target.with_name(f"{base}.pb.go")
        else:
            mapping = dict(o[1:].split("=", 1) for o in options if o.startswith("M"))
            import_path = mapping.get(proto, f"example.com/ext/{Path(proto).parent.as_posix()}")
            target = Path(out_dir) / import_path / f"{base}.pb.go"

        target.parent.mkdir(parents=True, exist_ok=True)
        body = self.contents.get(proto, "")
        target.write_text(f"// {proto} [{env[PLUGIN_ENV]}]\npackage {base}\n{body}")
        if "annotate_code" in options:
            target.with_name(target.name + ".meta").write_text(f"annotations for {proto}\n")
        return subprocess.CompletedProcess(cmd, 0, b"", b"")

    @property
    def protos(self) -> list[str]:
        return [c["proto"] for c in self.calls]


@pytest.fixture
def fake_protoc() -> FakeProtoc:
    return FakeProtoc()


@pytest.fixture
def protoc(fake_protoc: FakeProtoc, repo: Path) -> Protoc:
    return Protoc("/usr/local/bin/generate-protos", module_path=MODULE, cwd=repo, runner=fake_protoc)


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    """A repository tree holding the local description files."""
    root = tmp_path / "repo"
    for rel in LOCAL_PROTOS:
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text('syntax = "proto3";\n')
    return root


@pytest.fixture
def proto_root(tmp_path: Path) -> Path:
    """A protobuf source checkout holding the remote description files."""
    root = tmp_path / "protobuf"
    for rel in REMOTE_PROTOS:
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text('syntax = "proto3";\n')
    return root


@pytest.fixture
def generation_config() -> GenerationConfig:
    return GenerationConfig(
        preamble=PREAMBLE,
        overrides=PackageOverrides(entries={
            "google/protobuf/any.proto": f"{MODULE}/types/known/anypb",
        }),
        local=(
            GenerationJob(
                path="cmd/gen/testdata",
                annotate=frozenset({"cmd/gen/testdata/annotations/annotations.proto"}),
            ),
            GenerationJob(path="cmd/grpc/testdata", grpc=True),
            GenerationJob(
                path="internal/testprotos",
                exclude=frozenset({"internal/testprotos/irregular/irregular.proto"}),
            ),
        ),
        remote=(
            RemoteTarget(prefix="src", path="google/protobuf/any.proto"),
            RemoteTarget(prefix="benchmarks", path="benchmarks.proto"),
            RemoteTarget(prefix="src", path="google/protobuf/field_mask.proto"),
        ),
        relocations=(
            Relocation(
                source="example.com/ext/google/protobuf/field_mask.pb.go",
                destination=f"{MODULE}/internal/testprotos/fieldmaskpb/field_mask.pb.go",
            ),
        ),
        gofmt=None,
    )


@pytest.fixture
def make_settings(repo: Path, proto_root: Path, generation_config: GenerationConfig) -> Callable[..., Settings]:
    def _make(**overrides) -> Settings:
        values = {
            "repo_root": repo,
            "module_path": MODULE,
            "proto_root": proto_root,
            "plugin_executable": "/usr/local/bin/generate-protos",
            "sync_mode": SyncMode.DIFF,
            "generation": generation_config,
        }
        values.update(overrides)
        return Settings(**values)

    return _make


@pytest.fixture(autouse=True)
def restore_root_logger():
    """setup_logging replaces root handlers; put them back after each test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
