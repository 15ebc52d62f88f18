"""Tests for ResourceEvent model."""

from __future__ import annotations

from datetime import datetime

from awsnuke.models.event import Reason, ResourceEvent, resource_type_of
from tests.fixtures.resources import PlainResource


class Anonymous:
    def __str__(self) -> str:
        return "anon-1"


class TestResourceEvent:
    """Test suite for ResourceEvent."""

    def test_from_resource(self) -> None:
        event = ResourceEvent.from_resource(PlainResource("i-1", region="eu-central-1"), Reason.ERROR, "boom")

        assert event.resource_type == "Plain"
        assert event.resource_id == "i-1"
        assert event.region == "eu-central-1"
        assert event.reason == Reason.ERROR
        assert isinstance(event.timestamp, datetime)

    def test_from_resource_without_metadata(self) -> None:
        """Test opaque handles fall back to class name and empty region."""
        event = ResourceEvent.from_resource(Anonymous(), Reason.SKIP, "skipped")

        assert event.resource_type == "Anonymous"
        assert event.resource_id == "anon-1"
        assert event.region == ""

    def test_to_dict(self) -> None:
        event = ResourceEvent(
            resource_type="S3Bucket",
            resource_id="my-bucket",
            region="us-east-1",
            reason=Reason.REMOVE_TRIGGERED,
            message="triggered remove",
            timestamp=datetime(2025, 1, 2, 3, 4, 5),
        )

        assert event.to_dict() == {
            "resource_type": "S3Bucket",
            "resource_id": "my-bucket",
            "region": "us-east-1",
            "reason": "remove-triggered",
            "message": "triggered remove",
            "timestamp": "2025-01-02T03:04:05Z",
        }

    def test_resource_type_of(self) -> None:
        assert resource_type_of(PlainResource("x")) == "Plain"
        assert resource_type_of(Anonymous()) == "Anonymous"
