"""Lister registry.

Resource modules register one lister per resource type with
``@register_lister("TypeName")``. Listers run in registration order, which is
the import order in ``awsnuke.resources`` followed by declaration order within
each module.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

import boto3

ListerFunc = Callable[[boto3.Session], list[Any]]

_LISTERS: dict[str, ListerFunc] = {}


def register_lister(resource_type: str) -> Callable[[ListerFunc], ListerFunc]:
    """Register a lister function for a resource type.

    Raises:
        ValueError: If the resource type is already registered
    """

    def decorator(func: ListerFunc) -> ListerFunc:
        if resource_type in _LISTERS:
            raise ValueError(f"Lister for {resource_type} already registered")
        _LISTERS[resource_type] = func
        return func

    return decorator


@dataclass(frozen=True)
class BoundLister:
    """A lister bound to the session of the current run."""

    resource_type: str
    func: ListerFunc
    session: boto3.Session

    def __call__(self) -> list[Any]:
        return self.func(self.session)


def resource_type_names() -> list[str]:
    """Return all registered resource types in registration order."""
    return list(_LISTERS)


def get_listers(
    session: boto3.Session,
    targets: Optional[list[str]] = None,
    excludes: Optional[list[str]] = None,
) -> list[BoundLister]:
    """Bind registered listers to a session.

    Args:
        session: Session shared by all listers
        targets: Only include these resource types (optional)
        excludes: Leave out these resource types (optional)

    Returns:
        Listers in registration order

    Raises:
        ValueError: If a target or exclude names an unknown resource type
    """
    unknown = [name for name in (targets or []) + (excludes or []) if name not in _LISTERS]
    if unknown:
        raise ValueError(f"Unknown resource types: {', '.join(unknown)}")

    listers = []
    for resource_type, func in _LISTERS.items():
        if targets and resource_type not in targets:
            continue
        if excludes and resource_type in excludes:
            continue
        listers.append(BoundLister(resource_type=resource_type, func=func, session=session))

    return listers
