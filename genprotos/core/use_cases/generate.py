"""
Generate use case — the whole batch run.

Flow:
    local pass  → stage → sync against repo root
    remote pass → stage → relocate → sync <staging>/<module> against repo root

Each pass owns its staging directory, which is removed when the pass
ends.  A failure anywhere aborts the run; nothing after it executes.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from genprotos.adapters.shell.command import Protoc
from genprotos.core.models.settings import Settings
from genprotos.core.models.sync import SyncReport
from genprotos.core.services.local_generation import JobResult, generate_local
from genprotos.core.services.remote_generation import RemoteResult, generate_remote
from genprotos.core.services.staging import staging_area
from genprotos.core.services.sync import Emit, sync_output


@dataclass
class GenerateResult:
    """Result of a batch run."""

    local_jobs: list[JobResult] = field(default_factory=list)
    local_sync: SyncReport | None = None
    remote: RemoteResult | None = None
    remote_sync: SyncReport | None = None

    @property
    def reports(self) -> list[SyncReport]:
        return [r for r in (self.local_sync, self.remote_sync) if r is not None]

    @property
    def clean(self) -> bool:
        """True when no staged file differs from the repository."""
        return all(r.clean for r in self.reports)

    def to_dict(self) -> dict:
        return {
            "local": {
                "jobs": [
                    {
                        "path": j.job.path,
                        "generated": j.generated,
                        "skipped": j.skipped,
                        "import_file": j.import_file,
                    }
                    for j in self.local_jobs
                ],
                "sync": self.local_sync.to_dict() if self.local_sync else None,
            },
            "remote": {
                "generated": self.remote.generated if self.remote else [],
                "relocated": self.remote.relocated if self.remote else [],
                "sync": self.remote_sync.to_dict() if self.remote_sync else None,
            },
        }


def make_protoc(settings: Settings) -> Protoc:
    return Protoc(
        settings.plugin_executable,
        module_path=settings.module_path,
        config_path=settings.config_path,
        cwd=settings.repo_root,
    )


def run_generation(
    settings: Settings,
    protoc: Protoc | None = None,
    emit: Emit | None = None,
    local: bool = True,
    remote: bool = True,
) -> GenerateResult:
    """Run the local and then the remote pass, syncing after each.

    Args:
        settings: Resolved batch settings.
        protoc:   protoc launcher (default: built from settings).
        emit:     Receives sync output (``# path`` lines or diffs).
        local:    Run the local pass.
        remote:   Run the remote pass.
    """
    protoc = protoc or make_protoc(settings)
    suffixes = settings.generation.sync_suffixes
    result = GenerateResult()

    if local:
        with staging_area(settings.repo_root) as staging:
            result.local_jobs = generate_local(settings, protoc, staging)
            result.local_sync = sync_output(
                settings.repo_root, staging, settings.sync_mode, suffixes, emit,
            )

    if remote:
        with staging_area(settings.repo_root) as staging:
            result.remote = generate_remote(settings, protoc, staging)
            result.remote_sync = sync_output(
                settings.repo_root,
                staging / settings.module_path,
                settings.sync_mode,
                suffixes,
                emit,
            )

    return result
