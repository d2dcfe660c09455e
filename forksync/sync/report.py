"""
Sync Report — Outcome of a single rebase run.

Every run that gets past the precondition checks produces a report,
whether the rebase succeeded or not. Fatal aborts raise instead.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

STATUS_SYNCED = "synced"
STATUS_UP_TO_DATE = "up_to_date"
STATUS_REBASE_FAILED = "rebase_failed"


class SyncReport(BaseModel):
    """Result of RebaseSynchronizer.run()."""

    status: Literal["synced", "up_to_date", "rebase_failed"]
    branch: str
    exit_code: int = 0
    ts_iso: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    base_before: Optional[str] = None
    base_after: Optional[str] = None
    upstream_commit_count: int = 0

    internal_before: Optional[str] = None
    internal_after: Optional[str] = None
    internal_commit_count: int = 0
    amended: bool = False

    pushed: bool = False
    notifications_sent: List[str] = Field(default_factory=list)
    rebase_output: Optional[str] = None

    @property
    def new_upstream_commits(self) -> bool:
        return self.base_before is not None and self.base_before != self.base_after

    @property
    def internal_changed(self) -> bool:
        return self.internal_before is not None and self.internal_before != self.internal_after

    @classmethod
    def rebase_failed(
        cls,
        branch: str,
        exit_code: int,
        output: str,
        base_before: Optional[str] = None,
    ) -> "SyncReport":
        """Create a report for a rebase the tool could not complete."""
        return cls(
            status=STATUS_REBASE_FAILED,
            branch=branch,
            exit_code=exit_code,
            base_before=base_before,
            rebase_output=output,
        )
