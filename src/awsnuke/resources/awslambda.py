"""Lambda function resources."""

from __future__ import annotations

import boto3

from .base import BaseResource
from .registry import register_lister


class LambdaFunction(BaseResource):
    resource_type = "LambdaFunction"

    def _remove(self) -> None:
        self._create_client("lambda").delete_function(FunctionName=self.identifier)


@register_lister("LambdaFunction")
def list_lambda_functions(session: boto3.Session) -> list[LambdaFunction]:
    client = session.client("lambda")
    resources = []

    for page in client.get_paginator("list_functions").paginate():
        for function in page.get("Functions", []):
            resources.append(LambdaFunction(session, function["FunctionName"]))

    return resources
