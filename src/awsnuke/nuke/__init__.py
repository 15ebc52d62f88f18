"""Resource removal orchestration.

This module drains an AWS account: it lists resources, filters out the ones
that must stay, removes the rest and waits for asynchronous removals to
complete, retrying failures.

Classes:
    Nuke: Main orchestrator for a run
    SafetyChecker: Protection rule evaluation
    AuditStorage: Audit log storage and retrieval
    EventSink: Receiver of resource transition events
"""

from __future__ import annotations

from .audit import AuditStorage
from .engine import Nuke, describe_error
from .events import ConsoleEventSink, EventSink, MultiEventSink, NullEventSink, RecordingEventSink
from .safety import SafetyChecker

__all__ = [
    "AuditStorage",
    "ConsoleEventSink",
    "EventSink",
    "MultiEventSink",
    "Nuke",
    "NullEventSink",
    "RecordingEventSink",
    "SafetyChecker",
    "describe_error",
]
