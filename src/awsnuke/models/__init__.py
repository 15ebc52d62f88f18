"""Data models for aws-nuke runs."""

from __future__ import annotations

from .event import Reason, ResourceEvent
from .nuke_run import NukeRun, RunMode, RunStatus
from .parameters import NukeParameters
from .protection_rule import ProtectionRule, RuleType

__all__ = [
    "NukeParameters",
    "NukeRun",
    "ProtectionRule",
    "Reason",
    "ResourceEvent",
    "RuleType",
    "RunMode",
    "RunStatus",
]
