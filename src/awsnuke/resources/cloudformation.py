"""CloudFormation stack resources."""

from __future__ import annotations

import boto3

from ..exceptions import ResourceFiltered
from .base import BaseResource, tags_to_dict
from .registry import register_lister


class CloudFormationStack(BaseResource):
    resource_type = "CloudFormationStack"

    def __init__(self, session: boto3.Session, stack_name: str, status: str, tags: dict[str, str]) -> None:
        super().__init__(session, stack_name, tags=tags)
        self.status = status

    def filter(self) -> None:
        if self.status == "DELETE_COMPLETE":
            raise ResourceFiltered("already deleted")

    def _remove(self) -> None:
        self._create_client("cloudformation").delete_stack(StackName=self.identifier)

    def wait(self) -> None:
        waiter = self._create_client("cloudformation").get_waiter("stack_delete_complete")
        waiter.wait(StackName=self.identifier)


@register_lister("CloudFormationStack")
def list_cloudformation_stacks(session: boto3.Session) -> list[CloudFormationStack]:
    client = session.client("cloudformation")
    resources = []

    for page in client.get_paginator("describe_stacks").paginate():
        for stack in page.get("Stacks", []):
            resources.append(
                CloudFormationStack(
                    session,
                    stack["StackName"],
                    status=stack.get("StackStatus", ""),
                    tags=tags_to_dict(stack.get("Tags")),
                )
            )

    return resources
