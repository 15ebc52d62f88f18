"""EC2 resources: instances, volumes, key pairs and VPC networking."""

from __future__ import annotations

from typing import Any

import boto3

from ..exceptions import ResourceFiltered
from .base import BaseResource, tags_to_dict
from .registry import register_lister


class EC2Instance(BaseResource):
    resource_type = "EC2Instance"

    def __init__(self, session: boto3.Session, instance_id: str, state: str, tags: dict[str, str]) -> None:
        super().__init__(session, instance_id, tags=tags)
        self.state = state

    def filter(self) -> None:
        if self.state == "terminated":
            raise ResourceFiltered("already terminated")

    def _remove(self) -> None:
        self._create_client("ec2").terminate_instances(InstanceIds=[self.identifier])

    def wait(self) -> None:
        waiter = self._create_client("ec2").get_waiter("instance_terminated")
        waiter.wait(InstanceIds=[self.identifier])


class EC2Volume(BaseResource):
    resource_type = "EC2Volume"

    def _remove(self) -> None:
        self._create_client("ec2").delete_volume(VolumeId=self.identifier)


class EC2KeyPair(BaseResource):
    resource_type = "EC2KeyPair"

    def _remove(self) -> None:
        self._create_client("ec2").delete_key_pair(KeyName=self.identifier)


class EC2InternetGateway(BaseResource):
    """Internet gateway; it has to be detached from its VPCs before deletion."""

    resource_type = "EC2InternetGateway"

    def __init__(self, session: boto3.Session, gateway_id: str, vpc_ids: list[str], tags: dict[str, str]) -> None:
        super().__init__(session, gateway_id, tags=tags)
        self.vpc_ids = tuple(vpc_ids)

    def _remove(self) -> None:
        client = self._create_client("ec2")
        for vpc_id in self.vpc_ids:
            client.detach_internet_gateway(InternetGatewayId=self.identifier, VpcId=vpc_id)
        client.delete_internet_gateway(InternetGatewayId=self.identifier)


class EC2Subnet(BaseResource):
    resource_type = "EC2Subnet"

    def _remove(self) -> None:
        self._create_client("ec2").delete_subnet(SubnetId=self.identifier)


class EC2SecurityGroup(BaseResource):
    resource_type = "EC2SecurityGroup"

    def __init__(self, session: boto3.Session, group_id: str, group_name: str, tags: dict[str, str]) -> None:
        super().__init__(session, group_id, tags=tags)
        self.group_name = group_name

    def filter(self) -> None:
        if self.group_name == "default":
            raise ResourceFiltered("cannot delete group 'default'")

    def _remove(self) -> None:
        self._create_client("ec2").delete_security_group(GroupId=self.identifier)


class EC2VPC(BaseResource):
    resource_type = "EC2VPC"

    def __init__(self, session: boto3.Session, vpc_id: str, is_default: bool, tags: dict[str, str]) -> None:
        super().__init__(session, vpc_id, tags=tags)
        self.is_default = is_default

    def filter(self) -> None:
        if self.is_default:
            raise ResourceFiltered("default VPC")

    def _remove(self) -> None:
        self._create_client("ec2").delete_vpc(VpcId=self.identifier)


def _paginate(session: boto3.Session, operation: str, key: str) -> list[dict[str, Any]]:
    client = session.client("ec2")
    items: list[dict[str, Any]] = []
    for page in client.get_paginator(operation).paginate():
        items.extend(page.get(key, []))
    return items


@register_lister("EC2Instance")
def list_ec2_instances(session: boto3.Session) -> list[EC2Instance]:
    resources = []
    for reservation in _paginate(session, "describe_instances", "Reservations"):
        for instance in reservation.get("Instances", []):
            resources.append(
                EC2Instance(
                    session,
                    instance["InstanceId"],
                    state=instance.get("State", {}).get("Name", "unknown"),
                    tags=tags_to_dict(instance.get("Tags")),
                )
            )
    return resources


@register_lister("EC2Volume")
def list_ec2_volumes(session: boto3.Session) -> list[EC2Volume]:
    return [
        EC2Volume(session, volume["VolumeId"], tags=tags_to_dict(volume.get("Tags")))
        for volume in _paginate(session, "describe_volumes", "Volumes")
    ]


@register_lister("EC2KeyPair")
def list_ec2_key_pairs(session: boto3.Session) -> list[EC2KeyPair]:
    response = session.client("ec2").describe_key_pairs()
    return [
        EC2KeyPair(session, key_pair["KeyName"], tags=tags_to_dict(key_pair.get("Tags")))
        for key_pair in response.get("KeyPairs", [])
    ]


@register_lister("EC2InternetGateway")
def list_ec2_internet_gateways(session: boto3.Session) -> list[EC2InternetGateway]:
    return [
        EC2InternetGateway(
            session,
            gateway["InternetGatewayId"],
            vpc_ids=[attachment["VpcId"] for attachment in gateway.get("Attachments", [])],
            tags=tags_to_dict(gateway.get("Tags")),
        )
        for gateway in _paginate(session, "describe_internet_gateways", "InternetGateways")
    ]


@register_lister("EC2Subnet")
def list_ec2_subnets(session: boto3.Session) -> list[EC2Subnet]:
    return [
        EC2Subnet(session, subnet["SubnetId"], tags=tags_to_dict(subnet.get("Tags")))
        for subnet in _paginate(session, "describe_subnets", "Subnets")
    ]


@register_lister("EC2SecurityGroup")
def list_ec2_security_groups(session: boto3.Session) -> list[EC2SecurityGroup]:
    return [
        EC2SecurityGroup(
            session,
            group["GroupId"],
            group_name=group.get("GroupName", ""),
            tags=tags_to_dict(group.get("Tags")),
        )
        for group in _paginate(session, "describe_security_groups", "SecurityGroups")
    ]


@register_lister("EC2VPC")
def list_ec2_vpcs(session: boto3.Session) -> list[EC2VPC]:
    return [
        EC2VPC(
            session,
            vpc["VpcId"],
            is_default=vpc.get("IsDefault", False),
            tags=tags_to_dict(vpc.get("Tags")),
        )
        for vpc in _paginate(session, "describe_vpcs", "Vpcs")
    ]
