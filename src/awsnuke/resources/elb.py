"""Classic Elastic Load Balancers."""

from __future__ import annotations

import boto3

from .base import BaseResource
from .registry import register_lister


class ELBLoadBalancer(BaseResource):
    resource_type = "ELBLoadBalancer"

    def _remove(self) -> None:
        self._create_client("elb").delete_load_balancer(LoadBalancerName=self.identifier)


@register_lister("ELBLoadBalancer")
def list_elb_load_balancers(session: boto3.Session) -> list[ELBLoadBalancer]:
    client = session.client("elb")
    resources = []

    for page in client.get_paginator("describe_load_balancers").paginate():
        for load_balancer in page.get("LoadBalancerDescriptions", []):
            resources.append(ELBLoadBalancer(session, load_balancer["LoadBalancerName"]))

    return resources
