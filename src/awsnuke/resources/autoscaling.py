"""Auto Scaling group resources."""

from __future__ import annotations

import logging
import time

import boto3

from .base import BaseResource, tags_to_dict
from .registry import register_lister

logger = logging.getLogger(__name__)


class AutoScalingGroup(BaseResource):
    """Auto Scaling group.

    Deletion is forced, so running instances are terminated along with the
    group. The group disappears from the API only once all of them are gone,
    which is what ``wait()`` polls for.
    """

    resource_type = "AutoScalingGroup"

    poll_interval = 10

    def _remove(self) -> None:
        self._create_client("autoscaling").delete_auto_scaling_group(
            AutoScalingGroupName=self.identifier,
            ForceDelete=True,
        )

    def wait(self) -> None:
        client = self._create_client("autoscaling")
        while True:
            response = client.describe_auto_scaling_groups(AutoScalingGroupNames=[self.identifier])
            if not response.get("AutoScalingGroups"):
                return
            logger.debug(f"Auto Scaling group {self.identifier} still deleting")
            time.sleep(self.poll_interval)


@register_lister("AutoScalingGroup")
def list_autoscaling_groups(session: boto3.Session) -> list[AutoScalingGroup]:
    client = session.client("autoscaling")
    resources = []

    for page in client.get_paginator("describe_auto_scaling_groups").paginate():
        for group in page.get("AutoScalingGroups", []):
            tags = tags_to_dict(group.get("Tags"))
            resources.append(AutoScalingGroup(session, group["AutoScalingGroupName"], tags=tags))

    return resources
