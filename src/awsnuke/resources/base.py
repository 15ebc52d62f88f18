"""Resource handle base class and capability protocols.

A resource handle represents one discovered remote object. The orchestrator
only ever asks three optional questions of a handle, each expressed as a
runtime-checkable protocol:

    Filterable.filter() -> raise ResourceFiltered to exclude the resource
    Removable.remove()  -> trigger deletion, raise on failure
    Waitable.wait()     -> block until deletion has completed, raise on failure
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol, runtime_checkable

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

NOT_FOUND_ERROR_CODES = {
    "NoSuchEntity",
    "NoSuchBucket",
    "ResourceNotFoundException",
}


@runtime_checkable
class Filterable(Protocol):
    def filter(self) -> None: ...


@runtime_checkable
class Removable(Protocol):
    def remove(self) -> None: ...


@runtime_checkable
class Waitable(Protocol):
    def wait(self) -> None: ...


def is_not_found(error: ClientError) -> bool:
    """Check whether a client error means the resource no longer exists."""
    code = error.response.get("Error", {}).get("Code", "")
    return code in NOT_FOUND_ERROR_CODES or code.endswith("NotFound")


class BaseResource:
    """Base class for AWS resource handles.

    Subclasses set ``resource_type`` and implement ``_remove()``. Adding a
    ``filter()`` or ``wait()`` method opts the resource into the matching
    stage.

    Attributes:
        session: boto3 session shared by all resources of a run
        identifier: Human-readable identifier used in events
        region: Region the resource lives in
        tags: Resource tags (optional)
    """

    resource_type: str = ""

    def __init__(
        self,
        session: boto3.Session,
        identifier: str,
        region: Optional[str] = None,
        tags: Optional[dict[str, str]] = None,
    ) -> None:
        self.session = session
        self.identifier = identifier
        self.region = region or session.region_name
        self.tags = tags or {}

    def _create_client(self, service_name: str) -> Any:
        return self.session.client(service_name, region_name=self.region)

    def remove(self) -> None:
        """Trigger deletion of the resource.

        A resource that is already gone counts as removed.

        Raises:
            ClientError: If the deletion request was rejected
        """
        try:
            self._remove()
        except ClientError as e:
            if not is_not_found(e):
                raise
            logger.info(f"{self.resource_type} {self.identifier} already deleted")

    def _remove(self) -> None:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.identifier

    def __repr__(self) -> str:
        return f"<{self.resource_type} {self.identifier!r} ({self.region})>"


def tags_to_dict(tags: Optional[list[dict[str, str]]]) -> dict[str, str]:
    """Convert the AWS ``[{"Key": k, "Value": v}]`` tag list to a dict."""
    return {tag["Key"]: tag.get("Value", "") for tag in tags or []}
