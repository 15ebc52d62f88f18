"""Tests for the Nuke orchestrator.

Test coverage for the scan/filter/remove/wait/retry state machine.
"""

from __future__ import annotations

import random
import threading
from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError

from awsnuke.exceptions import ScanError
from awsnuke.models.event import Reason
from awsnuke.models.nuke_run import RunMode, RunStatus
from awsnuke.models.protection_rule import ProtectionRule, RuleType
from awsnuke.nuke import Nuke, RecordingEventSink, SafetyChecker, describe_error
from tests.fixtures.resources import (
    FilterableResource,
    FilterableWaitableResource,
    PlainResource,
    RemovableResource,
    WaitableResource,
    failing_lister,
    static_lister,
)


class StopRun(BaseException):
    """Escapes the orchestrator's per-resource error handling."""


def assert_partition(nuke: Nuke, resources: list) -> None:
    """Every resource is in exactly one bucket and nothing else is."""
    buckets = [nuke.queue, nuke.waiting, nuke.skipped, nuke.failed, nuke.finished]
    seen = sorted(id(resource) for bucket in buckets for resource in bucket)
    assert seen == sorted(id(resource) for resource in resources)


def events_for(sink: RecordingEventSink, name: str) -> list[Reason]:
    return [event.reason for event in sink.events if event.resource_id == name]


class TestNukeInit:
    """Test suite for Nuke construction."""

    def test_defaults(self) -> None:
        """Test dry-run, retry and wait are enabled by default."""
        nuke = Nuke(listers=[])

        assert nuke.dry_run is True
        assert nuke.retry is True
        assert nuke.wait is True
        assert nuke.max_retries is None
        assert nuke.bucket_counts() == {"queue": 0, "waiting": 0, "skipped": 0, "failed": 0, "finished": 0}

    def test_independent_runs_do_not_share_buckets(self) -> None:
        """Test bucket state belongs to the instance."""
        first = Nuke(listers=[static_lister(PlainResource("a"))])
        second = Nuke(listers=[])

        first.run()

        assert len(first.skipped) == 1
        assert second.bucket_counts()["skipped"] == 0


class TestScan:
    """Test suite for the scan stage."""

    def test_scan_preserves_lister_order(self) -> None:
        """Test results are ordered by lister, then by lister output."""
        a1, a2, b1 = PlainResource("a1"), PlainResource("a2"), PlainResource("b1")
        nuke = Nuke(listers=[static_lister(a1, a2), static_lister(b1)])

        assert nuke.scan() == [a1, a2, b1]

    def test_scan_aborts_on_first_lister_error(self) -> None:
        """Test a failing lister aborts the scan and later listers never run."""
        later = Mock(return_value=[])
        nuke = Nuke(listers=[static_lister(PlainResource("a")), failing_lister(RuntimeError("boom")), later])

        with pytest.raises(ScanError) as exc_info:
            nuke.scan()

        assert exc_info.value.resource_type == "Broken"
        assert "boom" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        later.assert_not_called()

    def test_run_fails_fast_without_removing_anything(self) -> None:
        """Test no remove or wait happens when any lister fails."""
        resource = WaitableResource("i-1")
        sink = RecordingEventSink()
        nuke = Nuke(
            listers=[static_lister(resource), failing_lister(RuntimeError("denied"))],
            event_sink=sink,
            dry_run=False,
        )

        with pytest.raises(ScanError):
            nuke.run()

        assert resource.remove_calls == 0
        assert resource.wait_calls == 0
        assert sink.events == []
        assert nuke.bucket_counts()["queue"] == 0


class TestFilterQueue:
    """Test suite for the filter stage."""

    def test_filter_rejection_moves_to_skipped(self) -> None:
        """Test rejected resources are skipped with the filter's reason."""
        keep = FilterableResource("keep")
        reject = FilterableResource("reject", reason="default VPC")
        sink = RecordingEventSink()
        nuke = Nuke(listers=[], event_sink=sink)
        nuke.queue = [keep, reject]

        nuke.filter_queue()

        assert nuke.queue == [keep]
        assert nuke.skipped == [reject]
        assert len(sink.events) == 1
        assert sink.events[0].reason == Reason.SKIP
        assert sink.events[0].message == "default VPC"

    def test_resources_without_filter_pass(self) -> None:
        """Test resources lacking a filter are never skipped."""
        plain = PlainResource("plain")
        sink = RecordingEventSink()
        nuke = Nuke(listers=[], event_sink=sink)
        nuke.queue = [plain]

        nuke.filter_queue()

        assert nuke.queue == [plain]
        assert sink.events == []

    def test_filter_preserves_queue_order(self) -> None:
        """Test surviving resources keep their relative order."""
        resources = [FilterableResource(f"r{i}", reason="odd" if i % 2 else None) for i in range(6)]
        nuke = Nuke(listers=[])
        nuke.queue = list(resources)

        nuke.filter_queue()

        assert [str(r) for r in nuke.queue] == ["r0", "r2", "r4"]

    def test_protection_rules_skip_after_own_filter(self) -> None:
        """Test protected resources are skipped with the protection reason."""
        checker = SafetyChecker(
            rules=[
                ProtectionRule(
                    rule_id="keep-prod",
                    rule_type=RuleType.NAME,
                    patterns={"names": ["prod-*"]},
                    description="Production",
                )
            ]
        )
        prod = FilterableResource("prod-db")
        dev = FilterableResource("dev-db")
        sink = RecordingEventSink()
        nuke = Nuke(listers=[], event_sink=sink, safety_checker=checker)
        nuke.queue = [prod, dev]

        nuke.filter_queue()

        assert nuke.queue == [dev]
        assert nuke.skipped == [prod]
        assert sink.events[0].message == "Production (rule: keep-prod)"

    def test_own_filter_reason_wins_over_protection(self) -> None:
        """Test a resource rejected by its own filter gets exactly one skip event."""
        checker = SafetyChecker(
            rules=[ProtectionRule(rule_id="all", rule_type=RuleType.TYPE, patterns={"resource_types": ["*"]})]
        )
        resource = FilterableResource("r", reason="already terminated")
        sink = RecordingEventSink()
        nuke = Nuke(listers=[], event_sink=sink, safety_checker=checker)
        nuke.queue = [resource]

        nuke.filter_queue()

        assert events_for(sink, "r") == [Reason.SKIP]
        assert sink.events[0].message == "already terminated"


class TestHandleQueue:
    """Test suite for the removal stage."""

    def test_dry_run_never_removes(self) -> None:
        """Test dry-run moves everything to skipped without remote calls."""
        resources = [RemovableResource(f"r{i}") for i in range(3)]
        sink = RecordingEventSink()
        nuke = Nuke(listers=[], event_sink=sink)
        nuke.queue = list(resources)

        nuke.handle_queue()

        assert nuke.skipped == resources
        assert all(r.remove_calls == 0 for r in resources)
        assert [e.message for e in sink.events] == ["would remove"] * 3
        assert all(e.reason == Reason.SUCCESS for e in sink.events)

    def test_execute_moves_success_to_waiting(self) -> None:
        """Test successful removal triggers a remove event."""
        resource = RemovableResource("r")
        sink = RecordingEventSink()
        nuke = Nuke(listers=[], event_sink=sink, dry_run=False)
        nuke.queue = [resource]

        nuke.handle_queue()

        assert nuke.waiting == [resource]
        assert resource.remove_calls == 1
        assert sink.events[0].reason == Reason.REMOVE_TRIGGERED
        assert sink.events[0].message == "triggered remove"

    def test_execute_moves_error_to_failed(self) -> None:
        """Test failed removal reports the error message."""
        resource = RemovableResource("r", always_fail=True)
        sink = RecordingEventSink()
        nuke = Nuke(listers=[], event_sink=sink, dry_run=False)
        nuke.queue = [resource]

        nuke.handle_queue()

        assert nuke.failed == [resource]
        assert sink.events[0].reason == Reason.ERROR
        assert sink.events[0].message == "cannot remove r"

    def test_resource_without_remove_succeeds(self) -> None:
        """Test a resource lacking remove counts as removed."""
        resource = PlainResource("p")
        nuke = Nuke(listers=[], dry_run=False)
        nuke.queue = [resource]

        nuke.handle_queue()

        assert nuke.waiting == [resource]

    def test_removal_is_sequential_in_queue_order(self) -> None:
        """Test resources are removed one after another in queue order."""
        order = []

        class Recorder(RemovableResource):
            def remove(self) -> None:
                order.append(self.name)

        nuke = Nuke(listers=[], dry_run=False)
        nuke.queue = [Recorder("c"), Recorder("a"), Recorder("b")]

        nuke.handle_queue()

        assert order == ["c", "a", "b"]


class TestWaitForRemovals:
    """Test suite for the wait stage."""

    def test_resources_without_wait_finish_silently(self) -> None:
        """Test non-waitable resources move to finished without an event."""
        resource = RemovableResource("r")
        sink = RecordingEventSink()
        nuke = Nuke(listers=[], event_sink=sink, dry_run=False)
        nuke.waiting = [resource]

        nuke.wait_for_removals()

        assert nuke.finished == [resource]
        assert sink.events == []

    def test_wait_disabled_skips_wait_calls(self) -> None:
        """Test disabled wait moves waitable resources straight to finished."""
        resource = WaitableResource("w", wait_failures=1)
        sink = RecordingEventSink()
        nuke = Nuke(listers=[], event_sink=sink, dry_run=False, wait=False)
        nuke.waiting = [resource]

        nuke.wait_for_removals()

        assert nuke.finished == [resource]
        assert resource.wait_calls == 0
        assert sink.events == []

    def test_wait_success_and_failure(self) -> None:
        """Test wait outcomes decide between finished and failed."""
        ok = WaitableResource("ok")
        bad = WaitableResource("bad", wait_failures=1)
        sink = RecordingEventSink()
        nuke = Nuke(listers=[], event_sink=sink, dry_run=False)
        nuke.waiting = [ok, bad]

        nuke.wait_for_removals()

        assert nuke.finished == [ok]
        assert nuke.failed == [bad]
        assert nuke.waiting == []
        assert events_for(sink, "ok") == [Reason.WAIT_PENDING, Reason.SUCCESS]
        assert events_for(sink, "bad") == [Reason.WAIT_PENDING, Reason.ERROR]
        assert [e.message for e in sink.events if e.resource_id == "bad"][-1] == "bad still exists"

    def test_waits_run_in_worker_threads(self) -> None:
        """Test every wait runs on a worker thread of the wait pool."""
        resources = [WaitableResource(f"w{i}", delay=0.01) for i in range(4)]
        nuke = Nuke(listers=[], dry_run=False)
        nuke.waiting = list(resources)

        nuke.wait_for_removals()

        assert all(r.wait_threads[0].startswith("nuke-wait") for r in resources)

    def test_concurrent_waits_partition_by_outcome(self) -> None:
        """Test random completion order never loses or duplicates a resource."""
        rng = random.Random(42)
        resources = [
            WaitableResource(f"w{i}", delay=rng.uniform(0, 0.05), wait_failures=rng.choice([0, 1]))
            for i in range(25)
        ]
        expected_failed = {r.name for r in resources if r.wait_failures}
        sink = RecordingEventSink()
        nuke = Nuke(listers=[], event_sink=sink, dry_run=False)
        nuke.waiting = list(resources)

        nuke.wait_for_removals()

        assert {r.name for r in nuke.failed} == expected_failed
        assert {r.name for r in nuke.finished} == {r.name for r in resources} - expected_failed
        assert len(nuke.failed) + len(nuke.finished) == len(resources)
        assert all(r.wait_calls == 1 for r in resources)
        assert sink.count(Reason.WAIT_PENDING) == 25
        assert sink.count(Reason.SUCCESS) + sink.count(Reason.ERROR) == 25

    def test_all_waits_overlap(self) -> None:
        """Test every waitable resource waits at the same time as all the others."""
        barrier = threading.Barrier(6)

        class Rendezvous(WaitableResource):
            def wait(self) -> None:
                barrier.wait(timeout=5)

        resources = [Rendezvous(f"w{i}") for i in range(6)]
        nuke = Nuke(listers=[], dry_run=False)
        nuke.waiting = list(resources)

        nuke.wait_for_removals()

        assert nuke.failed == []
        assert {r.name for r in nuke.finished} == {r.name for r in resources}

    def test_failing_sink_keeps_wait_outcomes(self) -> None:
        """Test a sink error during the wait stage leaves every resource in a bucket."""
        resources = [WaitableResource(f"w{i}", wait_failures=i % 2) for i in range(4)]

        def sink(resource, reason: Reason, message: str) -> None:
            if reason in (Reason.SUCCESS, Reason.ERROR):
                raise RuntimeError("sink down")

        nuke = Nuke(listers=[], event_sink=sink, dry_run=False)
        nuke.waiting = list(resources)

        with pytest.raises(RuntimeError, match="sink down"):
            nuke.wait_for_removals()

        assert_partition(nuke, resources)
        assert {r.name for r in nuke.failed} == {"w1", "w3"}


class TestRun:
    """Test suite for complete runs."""

    def test_dry_run_run(self) -> None:
        """Test a dry-run ends with everything skipped and a planned status."""
        resources = [RemovableResource("a"), FilterableResource("b", reason="default"), WaitableResource("c")]
        nuke = Nuke(listers=[static_lister(*resources)])

        result = nuke.run()

        assert nuke.skipped == [resources[1], resources[0], resources[2]]
        assert all(r.remove_calls == 0 for r in resources)
        assert result.mode == RunMode.DRY_RUN
        assert result.status == RunStatus.PLANNED
        assert result.skipped_count == 3
        assert result.total_resources == 3
        assert result.validate()

    def test_partition_holds_at_every_stage_boundary(self) -> None:
        """Test every scanned resource is always in exactly one bucket."""
        resources = [
            PlainResource("plain"),
            RemovableResource("flaky", remove_failures=1),
            FilterableResource("filtered", reason="nope"),
            WaitableResource("slow", delay=0.01),
            WaitableResource("wait-fails", wait_failures=1),
        ]
        nuke = Nuke(listers=[static_lister(*resources)], dry_run=False)

        nuke.queue = nuke.scan()
        assert_partition(nuke, resources)
        nuke.filter_queue()
        assert_partition(nuke, resources)
        nuke.handle_queue()
        assert_partition(nuke, resources)
        nuke.wait_for_removals()
        assert_partition(nuke, resources)
        nuke.retry_failed()
        assert_partition(nuke, resources)

        assert nuke.failed == []
        assert len(nuke.finished) == 4
        assert nuke.skipped == [resources[2]]

    def test_retry_converges(self) -> None:
        """Test flaky resources are retried until they are removed."""
        flaky_remove = RemovableResource("flaky-remove", remove_failures=2)
        flaky_wait = WaitableResource("flaky-wait", wait_failures=3)
        nuke = Nuke(listers=[static_lister(flaky_remove, flaky_wait)], dry_run=False)

        result = nuke.run()

        assert result.status == RunStatus.COMPLETED
        assert result.finished_count == 2
        assert result.retry_passes == 3
        assert flaky_remove.remove_calls == 3
        assert flaky_wait.wait_calls == 4
        assert result.validate()

    def test_retry_does_not_refilter(self) -> None:
        """Test filter is called exactly once even across retries."""
        resource = FilterableWaitableResource("r", remove_failures=2, wait_failures=1)
        nuke = Nuke(listers=[static_lister(resource)], dry_run=False)

        nuke.run()

        assert resource.filter_calls == 1
        assert resource.remove_calls == 4
        assert nuke.finished == [resource]

    def test_retry_disabled_runs_one_pass(self) -> None:
        """Test a failing resource stays failed after exactly one pass."""
        resource = RemovableResource("r", always_fail=True)
        nuke = Nuke(listers=[static_lister(resource)], dry_run=False, retry=False)

        result = nuke.run()

        assert resource.remove_calls == 1
        assert nuke.failed == [resource]
        assert result.status == RunStatus.FAILED
        assert result.retry_passes == 0
        assert result.succeeded is False

    def test_unbounded_retry_keeps_going(self) -> None:
        """Test a permanently failing resource is retried without limit."""
        class Stubborn(RemovableResource):
            def remove(self) -> None:
                self.remove_calls += 1
                if self.remove_calls >= 50:
                    raise StopRun()
                raise RuntimeError("DependencyViolation")

        resource = Stubborn("r")
        nuke = Nuke(listers=[static_lister(resource)], dry_run=False)

        with pytest.raises(StopRun):
            nuke.run()

        assert resource.remove_calls == 50
        assert nuke.retry_passes == 49

    def test_max_retries_guard(self) -> None:
        """Test the optional retry guard stops an endless retry loop."""
        resource = RemovableResource("r", always_fail=True)
        other = RemovableResource("ok")
        nuke = Nuke(listers=[static_lister(resource, other)], dry_run=False, max_retries=3)

        result = nuke.run()

        assert resource.remove_calls == 4
        assert result.retry_passes == 3
        assert result.failed_count == 1
        assert result.finished_count == 1
        assert result.status == RunStatus.PARTIAL

    def test_event_completeness(self) -> None:
        """Test exactly one event per bucket transition per resource."""
        plain = PlainResource("plain")
        filtered = FilterableResource("filtered", reason="skip me")
        flaky = RemovableResource("flaky", remove_failures=1)
        waiter = WaitableResource("waiter", wait_failures=1)
        sink = RecordingEventSink()
        nuke = Nuke(listers=[static_lister(plain, filtered, flaky, waiter)], event_sink=sink, dry_run=False)

        nuke.run()

        assert events_for(sink, "plain") == [Reason.REMOVE_TRIGGERED]
        assert events_for(sink, "filtered") == [Reason.SKIP]
        assert events_for(sink, "flaky") == [Reason.ERROR, Reason.REMOVE_TRIGGERED]
        assert events_for(sink, "waiter") == [
            Reason.REMOVE_TRIGGERED,
            Reason.WAIT_PENDING,
            Reason.ERROR,
            Reason.REMOVE_TRIGGERED,
            Reason.WAIT_PENDING,
            Reason.SUCCESS,
        ]

    def test_plain_callable_event_sink(self) -> None:
        """Test any callable taking (resource, reason, message) works as sink."""
        sink = Mock()
        resource = PlainResource("p")
        nuke = Nuke(listers=[static_lister(resource)], event_sink=sink)

        nuke.run()

        sink.assert_called_once_with(resource, Reason.SUCCESS, "would remove")

    def test_run_summary_metadata(self) -> None:
        """Test run summary carries session metadata and timing."""
        nuke = Nuke(listers=[], region="eu-west-1", account_id="123456789012", profile="sandbox")

        result = nuke.run()

        assert result.run_id.startswith("run_")
        assert result.region == "eu-west-1"
        assert result.account_id == "123456789012"
        assert result.profile == "sandbox"
        assert result.total_resources == 0
        assert result.completed_at >= result.started_at
        assert result.duration_seconds >= 0


class TestDescribeError:
    """Test suite for error message formatting."""

    def test_client_error(self) -> None:
        error = ClientError(
            {"Error": {"Code": "DependencyViolation", "Message": "resource has a dependent object"}},
            "DeleteVpc",
        )

        assert describe_error(error) == "DependencyViolation: resource has a dependent object"

    def test_plain_exception(self) -> None:
        assert describe_error(RuntimeError("boom")) == "boom"

    def test_exception_without_message(self) -> None:
        assert describe_error(TimeoutError()) == "TimeoutError"
