"""Resource types and their listers.

Importing this package registers every built-in lister. The import order
below is the scan order.
"""

from __future__ import annotations

from . import autoscaling, awslambda, cloudformation, ec2, elb, iam, s3  # noqa: F401
from .base import BaseResource, Filterable, Removable, Waitable
from .registry import BoundLister, get_listers, register_lister, resource_type_names

__all__ = [
    "BaseResource",
    "BoundLister",
    "Filterable",
    "Removable",
    "Waitable",
    "get_listers",
    "register_lister",
    "resource_type_names",
]
