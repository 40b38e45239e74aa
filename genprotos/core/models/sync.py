"""
Sync report — what a Sync Engine pass did (or would do).
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from genprotos.core.models.settings import SyncMode


class SyncReport(BaseModel):
    """Result of reconciling one staging area with its destination.

    Attributes:
        mode:      The sync mode the pass ran in.
        applied:   Relative paths written (APPLY only).
        differing: Relative paths whose destination differs from staging.
        unchanged: Relative paths already identical.
    """

    mode: SyncMode
    applied: list[str] = Field(default_factory=list)
    differing: list[str] = Field(default_factory=list)
    unchanged: list[str] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.applied) + len(self.differing) + len(self.unchanged)

    @property
    def clean(self) -> bool:
        """True when nothing differs from the destination."""
        return not self.differing

    def to_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "applied": self.applied,
            "differing": self.differing,
            "unchanged": self.unchanged,
        }
