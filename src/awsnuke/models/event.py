"""Resource event model.

One event is emitted for every bucket transition of a resource.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class Reason(Enum):
    """Kind of transition a resource went through."""

    SKIP = "skip"
    SUCCESS = "success"
    ERROR = "error"
    REMOVE_TRIGGERED = "remove-triggered"
    WAIT_PENDING = "wait-pending"


@dataclass
class ResourceEvent:
    """Recorded resource transition.

    Attributes:
        resource_type: Registered resource type name (e.g. "EC2Instance")
        resource_id: Human-readable resource identifier
        region: Region the resource lives in ("global" for global services)
        reason: Kind of transition
        message: Human-readable detail, e.g. the error or skip reason
        timestamp: When the transition happened (UTC)
    """

    resource_type: str
    resource_id: str
    region: str
    reason: Reason
    message: str
    timestamp: datetime = field(default_factory=datetime.utcnow)

    @classmethod
    def from_resource(cls, resource: Any, reason: Reason, message: str) -> "ResourceEvent":
        """Build an event from a resource handle.

        Handles are opaque, so type and region fall back to sensible defaults
        when the handle does not carry them.
        """
        return cls(
            resource_type=resource_type_of(resource),
            resource_id=str(resource),
            region=getattr(resource, "region", None) or "",
            reason=reason,
            message=message,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "resource_type": self.resource_type,
            "resource_id": self.resource_id,
            "region": self.region,
            "reason": self.reason.value,
            "message": self.message,
            "timestamp": self.timestamp.isoformat() + "Z",
        }


def resource_type_of(resource: Any) -> str:
    """Return the registered type name of a resource, or its class name."""
    return getattr(resource, "resource_type", None) or type(resource).__name__
