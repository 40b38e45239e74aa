"""
Run settings — everything resolved once at process start.

Built by ``genprotos.core.config.settings`` and passed
by reference to every component.  Never mutated after construction.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from genprotos.core.models.generation import GenerationConfig


class RunMode(str, Enum):
    """Which role this process plays."""

    BATCH = "batch"     # drive protoc over the configured trees
    PLUGIN = "plugin"   # act as protoc's plugin subprocess


class SyncMode(str, Enum):
    """How staged output is reconciled with the repository."""

    DIFF = "diff"       # print differences, touch nothing
    APPLY = "apply"     # overwrite destination files


class Settings(BaseModel):
    """Resolved configuration for one process run."""

    model_config = ConfigDict(frozen=True)

    mode: RunMode = RunMode.BATCH
    sync_mode: SyncMode = SyncMode.DIFF
    repo_root: Path
    module_path: str
    proto_root: Path | None = None
    plugin_executable: str = ""
    plugin_backends: tuple[str, ...] = ()
    config_path: Path | None = None
    generation: GenerationConfig
