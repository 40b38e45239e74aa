"""
Domain models — Pydantic types for the generator.

    from genprotos.core.models import GenerationConfig, GenerationJob, RemoteTarget
"""

from genprotos.core.models.generation import (
    GenerationConfig,
    GenerationJob,
    PackageOverrides,
    Relocation,
    RemoteTarget,
)
from genprotos.core.models.settings import RunMode, Settings, SyncMode
from genprotos.core.models.sync import SyncReport

__all__ = [
    "GenerationConfig",
    "GenerationJob",
    "PackageOverrides",
    "Relocation",
    "RemoteTarget",
    "RunMode",
    "Settings",
    "SyncMode",
    "SyncReport",
]
