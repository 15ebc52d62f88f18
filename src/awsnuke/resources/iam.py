"""IAM user resources."""

from __future__ import annotations

from typing import Any

import boto3
from botocore.exceptions import ClientError

from .base import BaseResource, is_not_found, tags_to_dict
from .registry import register_lister

GLOBAL_REGION = "global"


class IAMUser(BaseResource):
    """IAM user.

    IAM refuses to delete users that still own access keys, a login profile,
    policies or group memberships, so those are removed first.
    """

    resource_type = "IAMUser"

    def _create_client(self, service_name: str) -> Any:
        return self.session.client(service_name)

    def _remove(self) -> None:
        client = self._create_client("iam")
        user_name = self.identifier

        for key in client.list_access_keys(UserName=user_name).get("AccessKeyMetadata", []):
            client.delete_access_key(UserName=user_name, AccessKeyId=key["AccessKeyId"])

        for policy in client.list_attached_user_policies(UserName=user_name).get("AttachedPolicies", []):
            client.detach_user_policy(UserName=user_name, PolicyArn=policy["PolicyArn"])

        for policy_name in client.list_user_policies(UserName=user_name).get("PolicyNames", []):
            client.delete_user_policy(UserName=user_name, PolicyName=policy_name)

        for group in client.list_groups_for_user(UserName=user_name).get("Groups", []):
            client.remove_user_from_group(UserName=user_name, GroupName=group["GroupName"])

        try:
            client.delete_login_profile(UserName=user_name)
        except ClientError as e:
            if not is_not_found(e):
                raise

        client.delete_user(UserName=user_name)


@register_lister("IAMUser")
def list_iam_users(session: boto3.Session) -> list[IAMUser]:
    client = session.client("iam")
    resources = []

    for page in client.get_paginator("list_users").paginate():
        for user in page.get("Users", []):
            resources.append(
                IAMUser(session, user["UserName"], region=GLOBAL_REGION, tags=tags_to_dict(user.get("Tags")))
            )

    return resources
