"""Audit log of nuke runs.

Every run is written to one YAML file holding the run summary and all events
it emitted, so a run can be reviewed after the console output is gone.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator, Optional

import yaml

from ..models.event import ResourceEvent
from ..models.nuke_run import NukeRun

logger = logging.getLogger(__name__)

AUDIT_LOG_VERSION = "1.0"
DEFAULT_AUDIT_DIR = Path.home() / ".aws-nuke" / "audit-logs"


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() + "Z" if value else None


class AuditStorage:
    """Run audit logs on disk, one file per run, grouped by year and month.

    Layout:
        <storage_dir>/2025/11/run-<run_id>.yaml

    Attributes:
        storage_dir: Base directory, created on first use
    """

    def __init__(self, storage_dir: Optional[str] = None) -> None:
        self.storage_dir = Path(storage_dir).expanduser() if storage_dir else DEFAULT_AUDIT_DIR
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def log_run(self, run: NukeRun, events: list[ResourceEvent]) -> Path:
        """Write the audit log of a run, replacing any log with the same run ID.

        Args:
            run: Run summary
            events: Every event emitted during the run, in emission order

        Returns:
            Path of the written file
        """
        month_dir = self.storage_dir / f"{run.timestamp.year}" / f"{run.timestamp.month:02d}"
        month_dir.mkdir(parents=True, exist_ok=True)

        document = {
            "metadata": {
                "version": AUDIT_LOG_VERSION,
                "log_type": "nuke_run",
                "created_at": _isoformat(datetime.utcnow()),
            },
            "run": self._run_record(run),
            "events": [event.to_dict() for event in events],
        }

        path = month_dir / f"run-{run.run_id}.yaml"
        with path.open("w") as f:
            yaml.safe_dump(document, f, default_flow_style=False, sort_keys=False)

        logger.debug(f"Wrote audit log {path} with {len(events)} events")
        return path

    def get_run(self, run_id: str) -> Optional[dict[str, Any]]:
        """Load the audit log of a single run, or None if there is none."""
        for path in self.storage_dir.glob(f"*/*/run-{run_id}.yaml"):
            return self._load(path)
        return None

    def query_runs(
        self, since: Optional[datetime] = None, until: Optional[datetime] = None
    ) -> list[dict[str, Any]]:
        """Load all runs started within ``[since, until]``, oldest first.

        Either bound may be None to leave that side open.
        """
        runs = []
        for document in self._iter_documents():
            started = datetime.fromisoformat(document["run"]["timestamp"].rstrip("Z"))
            if since and started < since:
                continue
            if until and started > until:
                continue
            runs.append(document)

        return sorted(runs, key=lambda document: document["run"]["timestamp"])

    def _iter_documents(self) -> Iterator[dict[str, Any]]:
        for path in self.storage_dir.glob("*/*/run-*.yaml"):
            yield self._load(path)

    @staticmethod
    def _load(path: Path) -> dict[str, Any]:
        with path.open() as f:
            return yaml.safe_load(f)

    @staticmethod
    def _run_record(run: NukeRun) -> dict[str, Any]:
        return {
            "run_id": run.run_id,
            "timestamp": _isoformat(run.timestamp),
            "region": run.region,
            "account_id": run.account_id,
            "profile": run.profile,
            "mode": run.mode.value,
            "status": run.status.value,
            "total_resources": run.total_resources,
            "finished_count": run.finished_count,
            "failed_count": run.failed_count,
            "skipped_count": run.skipped_count,
            "retry_passes": run.retry_passes,
            "started_at": _isoformat(run.started_at),
            "completed_at": _isoformat(run.completed_at),
            "duration_seconds": run.duration_seconds,
        }
