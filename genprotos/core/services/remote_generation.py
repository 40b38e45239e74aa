"""
Remote batch generator — description files that live outside the repo.

Targets are ``(prefix, path)`` pairs resolved under the protobuf source
root; nothing is fetched.  Output is written by Go import path, so
the target order only affects log order.  After all targets ran, the
configured relocations copy staged files over each other to stand in
for package moves upstream has not made yet.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from genprotos.adapters.shell.command import Protoc
from genprotos.adapters.shell.filesystem import copy_file
from genprotos.core.errors import ConfigError
from genprotos.core.models.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class RemoteResult:
    """What the remote pass produced."""

    generated: list[str] = field(default_factory=list)   # description paths
    relocated: list[str] = field(default_factory=list)   # destination paths


def apply_relocations(settings: Settings, staging: Path) -> list[str]:
    """Copy each relocation source over its destination inside staging."""
    done: list[str] = []
    for relocation in settings.generation.relocations:
        source = staging / relocation.source
        if not source.is_file():
            if relocation.optional:
                logger.warning("Relocation source was not generated, skipping: %s", relocation.source)
                continue
            raise ConfigError(f"relocation source was not generated: {relocation.source}")
        copy_file(source, staging / relocation.destination)
        logger.info("Relocated %s → %s", relocation.source, relocation.destination)
        done.append(relocation.destination)
    return done


def generate_remote(settings: Settings, protoc: Protoc, staging: Path) -> RemoteResult:
    """Compile every remote target into ``staging``, then relocate."""
    if settings.proto_root is None:
        raise ConfigError("protobuf source root is not set")

    result = RemoteResult()
    opts = settings.generation.overrides.option_string()
    for target in settings.generation.remote:
        include = settings.proto_root / target.prefix if target.prefix else settings.proto_root
        protoc.run("go", f"-I{include}", f"--go_out={opts}:{staging}", target.path)
        result.generated.append(target.path)

    result.relocated = apply_relocations(settings, staging)
    logger.info("Remote: %d generated, %d relocated", len(result.generated), len(result.relocated))
    return result
