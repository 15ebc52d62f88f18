"""Nuke run model.

Summary of one complete run: mode, outcome and per-bucket counts.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class RunMode(Enum):
    """Run execution mode."""

    DRY_RUN = "dry-run"
    EXECUTE = "execute"


class RunStatus(Enum):
    """Final run status.

    planned: dry-run, nothing was removed
    completed: every eligible resource was removed
    partial: some resources were removed, some failed
    failed: resources failed and none were removed
    """

    PLANNED = "planned"
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass
class NukeRun:
    """Nuke run entity.

    Attributes:
        run_id: Unique identifier for the run
        timestamp: When the run was started (UTC)
        mode: dry-run or execute
        status: Final status
        total_resources: Number of resources returned by the scan
        finished_count: Resources confirmed removed
        failed_count: Resources still failing when the run ended
        skipped_count: Resources filtered out or skipped by dry-run
        retry_passes: Number of retry passes that were executed
        region: Region of the session (optional)
        account_id: AWS account ID (optional)
        profile: AWS profile used for credentials (optional)
        started_at: When the scan started (optional)
        completed_at: When the last stage ended (optional)
        duration_seconds: Total run duration (optional)
    """

    run_id: str
    timestamp: datetime
    mode: RunMode
    status: RunStatus
    total_resources: int
    finished_count: int = 0
    failed_count: int = 0
    skipped_count: int = 0
    retry_passes: int = 0
    region: Optional[str] = None
    account_id: Optional[str] = None
    profile: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    duration_seconds: Optional[float] = None

    @property
    def succeeded(self) -> bool:
        return self.failed_count == 0

    def validate(self) -> bool:
        """Validate run invariants.

        Validation rules:
            - finished_count + failed_count + skipped_count == total_resources
            - completed_at must be after started_at
            - dry-run mode must have planned status and nothing finished

        Returns:
            True if validation passes

        Raises:
            ValueError: If any validation rule fails
        """
        if self.finished_count + self.failed_count + self.skipped_count != self.total_resources:
            raise ValueError("Resource counts don't match total")

        if self.completed_at and self.started_at:
            if self.completed_at < self.started_at:
                raise ValueError("Completion time before start time")

        if self.mode == RunMode.DRY_RUN:
            if self.status != RunStatus.PLANNED:
                raise ValueError("Dry-run mode must have planned status")
            if self.finished_count:
                raise ValueError("Dry-run mode cannot finish resources")

        return True
