"""Event sinks.

The orchestrator reports every bucket transition of a resource to an event
sink as ``(resource, reason, message)``. Sinks are only ever called from the
orchestrator's control thread.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional

from rich.console import Console
from rich.markup import escape

from ..models.event import Reason, ResourceEvent, resource_type_of

REASON_STYLES = {
    Reason.SKIP: "yellow",
    Reason.SUCCESS: "green",
    Reason.ERROR: "bold red",
    Reason.REMOVE_TRIGGERED: "cyan",
    Reason.WAIT_PENDING: "blue",
}


class EventSink(ABC):
    """Receiver of resource transition events."""

    @abstractmethod
    def emit(self, resource: Any, reason: Reason, message: str) -> None:
        """Handle one transition of a resource."""

    def __call__(self, resource: Any, reason: Reason, message: str) -> None:
        self.emit(resource, reason, message)


class ConsoleEventSink(EventSink):
    """Print events as ``<region> - <type> - '<id>' - <message>`` lines."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def emit(self, resource: Any, reason: Reason, message: str) -> None:
        region = getattr(resource, "region", None) or "-"
        style = REASON_STYLES.get(reason, "")
        self.console.print(
            f"{escape(region)} - {escape(resource_type_of(resource))} - '{escape(str(resource))}' - "
            f"[{style}]{escape(message)}[/{style}]"
        )


class RecordingEventSink(EventSink):
    """Keep every event in memory, e.g. for the audit log."""

    def __init__(self) -> None:
        self.events: list[ResourceEvent] = []

    def emit(self, resource: Any, reason: Reason, message: str) -> None:
        self.events.append(ResourceEvent.from_resource(resource, reason, message))

    def count(self, reason: Reason) -> int:
        return sum(1 for event in self.events if event.reason == reason)


class MultiEventSink(EventSink):
    """Forward every event to several sinks, in order."""

    def __init__(self, sinks: Iterable[EventSink]) -> None:
        self.sinks = list(sinks)

    def emit(self, resource: Any, reason: Reason, message: str) -> None:
        for sink in self.sinks:
            sink.emit(resource, reason, message)


class NullEventSink(EventSink):
    def emit(self, resource: Any, reason: Reason, message: str) -> None:
        pass
