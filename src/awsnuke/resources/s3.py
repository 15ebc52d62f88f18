"""S3 bucket resources."""

from __future__ import annotations

import logging
from typing import Any

import boto3
from botocore.exceptions import ClientError

from .base import BaseResource
from .registry import register_lister

logger = logging.getLogger(__name__)

# delete_objects accepts at most 1000 keys per request
DELETE_BATCH_SIZE = 1000

# Location constraints reported for buckets created before region names were used
LEGACY_LOCATIONS = {"EU": "eu-west-1"}


class S3Bucket(BaseResource):
    """S3 bucket.

    Buckets must be empty before they can be deleted, so removal first deletes
    every object version and delete marker.
    """

    resource_type = "S3Bucket"

    def _remove(self) -> None:
        client = self._create_client("s3")
        self._empty(client)
        client.delete_bucket(Bucket=self.identifier)

    def _empty(self, client: Any) -> None:
        batch: list[dict[str, str]] = []

        for page in client.get_paginator("list_object_versions").paginate(Bucket=self.identifier):
            for entry in page.get("Versions", []) + page.get("DeleteMarkers", []):
                batch.append({"Key": entry["Key"], "VersionId": entry["VersionId"]})
                if len(batch) == DELETE_BATCH_SIZE:
                    self._delete_batch(client, batch)
                    batch = []

        if batch:
            self._delete_batch(client, batch)

    def _delete_batch(self, client: Any, batch: list[dict[str, str]]) -> None:
        response = client.delete_objects(Bucket=self.identifier, Delete={"Objects": batch, "Quiet": True})
        errors = response.get("Errors", [])
        if errors:
            first = errors[0]
            raise RuntimeError(
                f"Failed to delete {len(errors)} objects from {self.identifier}: "
                f"{first.get('Key')}: {first.get('Message')}"
            )
        logger.debug(f"Deleted {len(batch)} objects from {self.identifier}")

    def wait(self) -> None:
        self._create_client("s3").get_waiter("bucket_not_exists").wait(Bucket=self.identifier)


def _bucket_region(client: Any, bucket_name: str) -> str:
    response = client.get_bucket_location(Bucket=bucket_name)
    # Buckets in us-east-1 report no location constraint
    location = response.get("LocationConstraint") or "us-east-1"
    return LEGACY_LOCATIONS.get(location, location)


@register_lister("S3Bucket")
def list_s3_buckets(session: boto3.Session) -> list[S3Bucket]:
    """List buckets located in the session's region.

    ListBuckets is global, so buckets from other regions are left for runs
    against those regions.
    """
    client = session.client("s3")
    resources = []

    for bucket in client.list_buckets().get("Buckets", []):
        name = bucket["Name"]
        try:
            region = _bucket_region(client, name)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "NoSuchBucket":
                logger.debug(f"Bucket {name} disappeared while listing")
                continue
            raise

        if region != session.region_name:
            continue

        resources.append(S3Bucket(session, name, region=region))

    return resources
