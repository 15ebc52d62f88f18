"""Tests for NukeRun model."""

from __future__ import annotations

from datetime import datetime

import pytest

from awsnuke.models.nuke_run import NukeRun, RunMode, RunStatus


class TestNukeRun:
    """Test suite for NukeRun model."""

    def test_create_execute_run(self) -> None:
        """Test creating an execute run with counts."""
        run = NukeRun(
            run_id="run_123",
            timestamp=datetime(2025, 11, 11, 15, 30, 0),
            mode=RunMode.EXECUTE,
            status=RunStatus.PARTIAL,
            total_resources=10,
            finished_count=7,
            failed_count=2,
            skipped_count=1,
        )

        assert run.validate() is True
        assert run.succeeded is False
        assert run.retry_passes == 0

    def test_validate_count_mismatch(self) -> None:
        """Test validation fails when counts don't add up."""
        run = NukeRun(
            run_id="run_123",
            timestamp=datetime(2025, 11, 11),
            mode=RunMode.EXECUTE,
            status=RunStatus.COMPLETED,
            total_resources=5,
            finished_count=3,
        )

        with pytest.raises(ValueError, match="don't match total"):
            run.validate()

    def test_validate_completion_before_start(self) -> None:
        run = NukeRun(
            run_id="run_123",
            timestamp=datetime(2025, 11, 11),
            mode=RunMode.EXECUTE,
            status=RunStatus.COMPLETED,
            total_resources=0,
            started_at=datetime(2025, 11, 11, 12, 0, 0),
            completed_at=datetime(2025, 11, 11, 11, 0, 0),
        )

        with pytest.raises(ValueError, match="before start"):
            run.validate()

    def test_validate_dry_run_must_be_planned(self) -> None:
        """Test dry-run runs must have planned status."""
        run = NukeRun(
            run_id="run_123",
            timestamp=datetime(2025, 11, 11),
            mode=RunMode.DRY_RUN,
            status=RunStatus.COMPLETED,
            total_resources=1,
            skipped_count=1,
        )

        with pytest.raises(ValueError, match="planned status"):
            run.validate()

    def test_validate_dry_run_cannot_finish(self) -> None:
        run = NukeRun(
            run_id="run_123",
            timestamp=datetime(2025, 11, 11),
            mode=RunMode.DRY_RUN,
            status=RunStatus.PLANNED,
            total_resources=1,
            finished_count=1,
        )

        with pytest.raises(ValueError, match="cannot finish"):
            run.validate()
