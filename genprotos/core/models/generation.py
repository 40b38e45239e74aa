"""
Generation models — the fixed tables that drive a generation run.

Loaded once from ``generation.yml`` at startup and never mutated.
Every component that needs a table receives it by reference.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_LEGACY_PATTERN = r"legacy/proto[23]_[0-9]{8}_[0-9a-f]{8}/"


class PackageOverrides(BaseModel):
    """Description-file path → Go import path.

    Overrides the import path protoc-gen-go would otherwise infer
    from the file's ``go_package`` option.
    """

    model_config = ConfigDict(frozen=True)

    entries: dict[str, str] = Field(default_factory=dict)

    def get(self, proto_path: str) -> str | None:
        return self.entries.get(proto_path)

    def merged(self, extra: Mapping[str, str]) -> PackageOverrides:
        """Return a new table with ``extra`` layered over this one."""
        if not extra:
            return self
        return PackageOverrides(entries={**self.entries, **extra})

    def option_string(self) -> str:
        """Render as comma-separated ``M<path>=<import>`` plugin options.

        Keys are sorted so the option string is stable between runs.
        """
        return ",".join(f"M{path}={self.entries[path]}" for path in sorted(self.entries))

    def __len__(self) -> int:
        return len(self.entries)


class GenerationJob(BaseModel):
    """A local directory of description files to regenerate."""

    model_config = ConfigDict(frozen=True)

    path: str                                       # relative to repo root
    grpc: bool = False                              # also run the grpc backend
    annotate: frozenset[str] = frozenset()          # repo-relative, get annotate_code
    exclude: frozenset[str] = frozenset()           # repo-relative, skipped

    @property
    def backends(self) -> str:
        return "go,grpc" if self.grpc else "go"

    @property
    def is_testdata(self) -> bool:
        return self.path.rstrip("/").rsplit("/", 1)[-1] == "testdata"


class RemoteTarget(BaseModel):
    """A description file outside the repo, resolved under the proto root."""

    model_config = ConfigDict(frozen=True)

    prefix: str = ""    # search path, relative to the proto root
    path: str           # description file, relative to the prefix


class Relocation(BaseModel):
    """Copy one staged file over another after remote generation.

    An optional relocation whose source was not staged is skipped;
    otherwise a missing source aborts the run.
    """

    model_config = ConfigDict(frozen=True)

    source: str
    destination: str
    optional: bool = False


class GenerationConfig(BaseModel):
    """Everything a batch run needs besides paths discovered at startup."""

    model_config = ConfigDict(frozen=True)

    preamble: tuple[str, ...] = ()
    overrides: PackageOverrides = Field(default_factory=PackageOverrides)
    local: tuple[GenerationJob, ...] = ()
    remote: tuple[RemoteTarget, ...] = ()
    relocations: tuple[Relocation, ...] = ()
    plugins: dict[str, str] = Field(
        default_factory=lambda: {"go": "protoc-gen-go", "grpc": "protoc-gen-go-grpc"},
    )
    field_number_package: str = "google.protobuf"
    field_number_dir: str = "internal/fieldnum"
    legacy_pattern: str = DEFAULT_LEGACY_PATTERN
    sync_suffixes: tuple[str, ...] = (".go", ".meta")
    gofmt: str | None = "gofmt"

    @field_validator("overrides", mode="before")
    @classmethod
    def _wrap_overrides(cls, value: object) -> object:
        # YAML gives a flat mapping
        if isinstance(value, Mapping) and "entries" not in value:
            return {"entries": dict(value)}
        return value

    @field_validator("legacy_pattern")
    @classmethod
    def _check_pattern(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid legacy_pattern: {e}") from e
        return value

    @property
    def legacy_rx(self) -> re.Pattern[str]:
        return re.compile(self.legacy_pattern)

    def preamble_text(self) -> str:
        """The generated-file preamble, newline-terminated."""
        return "".join(f"{line}\n" for line in self.preamble)

