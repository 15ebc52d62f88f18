"""Nuke orchestrator.

Moves resources through Scan -> Filter -> Remove -> Wait and retries failed
resources until none are left.
"""

from __future__ import annotations

import logging
import uuid
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from botocore.exceptions import ClientError

from ..exceptions import ScanError
from ..models.event import Reason
from ..models.nuke_run import NukeRun, RunMode, RunStatus
from ..resources.base import Filterable, Removable, Waitable
from .events import NullEventSink
from .safety import SafetyChecker

logger = logging.getLogger(__name__)

Lister = Callable[[], list[Any]]
Sink = Callable[[Any, Reason, str], None]


def describe_error(error: BaseException) -> str:
    """Turn a per-resource error into the message attached to its event."""
    if isinstance(error, ClientError):
        code = error.response.get("Error", {}).get("Code", "Unknown")
        message = error.response.get("Error", {}).get("Message", str(error))
        return f"{code}: {message}"
    return str(error) or type(error).__name__


def _lister_name(lister: Lister) -> str:
    return getattr(lister, "resource_type", None) or getattr(lister, "__name__", repr(lister))


class Nuke:
    """Resource removal orchestrator.

    Owns five disjoint buckets of resource handles. Between stages every
    scanned resource is in exactly one of them:

        queue     awaiting filter/remove
        waiting   remove triggered, awaiting completion
        skipped   filtered out, protected or dry-run
        failed    remove or wait raised
        finished  confirmed removed

    Handles are never mutated; stages only move them between buckets and
    report each move to the event sink.

    Attributes:
        listers: Zero-argument listers, called in order during scan
        event_sink: Receiver of one event per bucket transition
        dry_run: Only report what would be removed
        retry: Re-run remove and wait for failed resources until none fail
        wait: Wait for asynchronous removals to complete
        max_retries: Stop after this many retry passes (None = unbounded)
        safety_checker: Protection rules consulted during filtering (optional)
    """

    def __init__(
        self,
        listers: Sequence[Lister],
        event_sink: Optional[Sink] = None,
        dry_run: bool = True,
        retry: bool = True,
        wait: bool = True,
        max_retries: Optional[int] = None,
        safety_checker: Optional[SafetyChecker] = None,
        region: Optional[str] = None,
        account_id: Optional[str] = None,
        profile: Optional[str] = None,
    ) -> None:
        self.listers = list(listers)
        self.event_sink = event_sink or NullEventSink()
        self.dry_run = dry_run
        self.retry = retry
        self.wait = wait
        self.max_retries = max_retries
        self.safety_checker = safety_checker
        self.region = region
        self.account_id = account_id
        self.profile = profile

        self.queue: list[Any] = []
        self.waiting: list[Any] = []
        self.skipped: list[Any] = []
        self.failed: list[Any] = []
        self.finished: list[Any] = []

        self.scanned_count = 0
        self.retry_passes = 0

    def run(self) -> NukeRun:
        """Run the whole pipeline.

        Returns:
            Summary of the run

        Raises:
            ScanError: If any lister fails; nothing is removed in that case
        """
        started_at = datetime.utcnow()

        self.queue = self.scan()
        self.scanned_count = len(self.queue)

        self.filter_queue()
        self.handle_queue()
        self.wait_for_removals()

        if self.retry:
            while self.failed:
                if self.max_retries is not None and self.retry_passes >= self.max_retries:
                    logger.warning(f"Giving up after {self.retry_passes} retries: {len(self.failed)} still failing")
                    break

                logger.info(
                    f"Retrying: {len(self.finished)} finished, {len(self.failed)} failed, "
                    f"{len(self.skipped)} skipped."
                )
                self.retry_failed()

        completed_at = datetime.utcnow()
        logger.info(
            f"Nuke complete: {len(self.finished)} finished, {len(self.failed)} failed, "
            f"{len(self.skipped)} skipped."
        )

        return NukeRun(
            run_id=f"run_{uuid.uuid4()}",
            timestamp=started_at,
            mode=RunMode.DRY_RUN if self.dry_run else RunMode.EXECUTE,
            status=self._final_status(),
            total_resources=self.scanned_count,
            finished_count=len(self.finished),
            failed_count=len(self.failed),
            skipped_count=len(self.skipped),
            retry_passes=self.retry_passes,
            region=self.region,
            account_id=self.account_id,
            profile=self.profile,
            started_at=started_at,
            completed_at=completed_at,
            duration_seconds=(completed_at - started_at).total_seconds(),
        )

    def scan(self) -> list[Any]:
        """Call every lister in order and concatenate their results.

        Raises:
            ScanError: On the first lister failure
        """
        result: list[Any] = []

        for lister in self.listers:
            name = _lister_name(lister)
            try:
                resources = lister()
            except Exception as e:
                logger.error(f"Listing {name} failed: {e}")
                raise ScanError(name, e) from e

            logger.debug(f"Listed {len(resources)} {name} resources")
            result.extend(resources)

        return result

    def filter_queue(self) -> None:
        """Move resources rejected by their own filter or by protection rules to skipped."""
        temp = self.queue
        self.queue = []

        for resource in temp:
            reason = self._filter_reason(resource)
            if reason is None:
                self.queue.append(resource)
                continue

            self.skipped.append(resource)
            self._emit(resource, Reason.SKIP, reason)

    def _filter_reason(self, resource: Any) -> Optional[str]:
        if isinstance(resource, Filterable):
            try:
                resource.filter()
            except Exception as e:
                return describe_error(e)

        if self.safety_checker is not None:
            is_protected, reason = self.safety_checker.is_protected(resource)
            if is_protected:
                return reason or "protected"

        return None

    def handle_queue(self) -> None:
        """Remove queued resources one at a time, in queue order."""
        temp = self.queue
        self.queue = []

        for resource in temp:
            if self.dry_run:
                self.skipped.append(resource)
                self._emit(resource, Reason.SUCCESS, "would remove")
                continue

            try:
                if isinstance(resource, Removable):
                    resource.remove()
            except Exception as e:
                self.failed.append(resource)
                self._emit(resource, Reason.ERROR, describe_error(e))
                continue

            self.waiting.append(resource)
            self._emit(resource, Reason.REMOVE_TRIGGERED, "triggered remove")

    def wait_for_removals(self) -> None:
        """Wait concurrently for every waiting resource to be gone.

        One thread per waitable resource; the stage returns once all of them
        are done. Threads only report outcomes, buckets and the event sink are
        touched from this thread alone.
        """
        temp = self.waiting
        self.waiting = []

        if not self.wait:
            self.finished.extend(temp)
            return

        waitables = []
        for resource in temp:
            if not isinstance(resource, Waitable):
                self.finished.append(resource)
                continue

            waitables.append(resource)
            self._emit(resource, Reason.WAIT_PENDING, "waiting")

        if not waitables:
            return

        with ThreadPoolExecutor(max_workers=len(waitables), thread_name_prefix="nuke-wait") as executor:
            futures = [executor.submit(_wait_for, resource) for resource in waitables]

            outcomes = [future.result() for future in as_completed(futures)]

        # Buckets are settled before any event is emitted
        events = []
        for resource, error in outcomes:
            if error is not None:
                self.failed.append(resource)
                events.append((resource, Reason.ERROR, describe_error(error)))
            else:
                self.finished.append(resource)
                events.append((resource, Reason.SUCCESS, "removed"))

        for resource, reason, message in events:
            self._emit(resource, reason, message)

    def retry_failed(self) -> None:
        """Queue all failed resources again and re-run remove and wait.

        Filtering is not repeated.
        """
        self.retry_passes += 1
        self.queue = self.failed
        self.failed = []

        self.handle_queue()
        self.wait_for_removals()

    def bucket_counts(self) -> dict[str, int]:
        return {
            "queue": len(self.queue),
            "waiting": len(self.waiting),
            "skipped": len(self.skipped),
            "failed": len(self.failed),
            "finished": len(self.finished),
        }

    def _final_status(self) -> RunStatus:
        if self.dry_run:
            return RunStatus.PLANNED
        if not self.failed:
            return RunStatus.COMPLETED
        if self.finished:
            return RunStatus.PARTIAL
        return RunStatus.FAILED

    def _emit(self, resource: Any, reason: Reason, message: str) -> None:
        self.event_sink(resource, reason, message)


def _wait_for(resource: Any) -> tuple[Any, Optional[BaseException]]:
    try:
        resource.wait()
    except Exception as e:
        return resource, e
    return resource, None
