"""Protection rule model.

Configuration-driven rules that keep matching resources out of a nuke run.
"""

from __future__ import annotations

import fnmatch
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .event import resource_type_of


class RuleType(Enum):
    """Protection rule type."""

    NAME = "name"
    TYPE = "type"
    TAG = "tag"


@dataclass
class ProtectionRule:
    """Protection rule entity.

    Pattern keys per rule type:
        name: {"names": [glob, ...], "resource_types": [type, ...] (optional scope)}
        type: {"resource_types": [glob, ...]}
        tag:  {"tag_key": str, "tag_values": [glob, ...] (optional, any value if empty)}

    Attributes:
        rule_id: Unique identifier for the rule
        rule_type: How the rule matches resources
        enabled: Disabled rules are never evaluated
        priority: Evaluation order, 1 = highest
        patterns: Type-specific match patterns
        description: Human-readable description used as skip reason (optional)
    """

    rule_id: str
    rule_type: RuleType
    enabled: bool = True
    priority: int = 100
    patterns: dict[str, Any] = field(default_factory=dict)
    description: Optional[str] = None

    def matches(self, resource: Any) -> bool:
        """Check whether a resource handle matches this rule.

        Args:
            resource: Resource handle

        Returns:
            True if the rule protects the resource
        """
        resource_type = resource_type_of(resource)

        if self.rule_type == RuleType.TYPE:
            return _match_any(resource_type, self.patterns.get("resource_types", []))

        scope = self.patterns.get("resource_types")
        if scope and not _match_any(resource_type, scope):
            return False

        if self.rule_type == RuleType.NAME:
            return _match_any(str(resource), self.patterns.get("names", []))

        if self.rule_type == RuleType.TAG:
            tags = getattr(resource, "tags", None) or {}
            tag_key = self.patterns.get("tag_key", "")
            if tag_key not in tags:
                return False
            tag_values = self.patterns.get("tag_values") or []
            return not tag_values or _match_any(tags[tag_key], tag_values)

        return False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProtectionRule":
        """Build a rule from its config file representation.

        Raises:
            ValueError: If the rule type is unknown or the rule has no ID
        """
        rule_id = data.get("rule-id")
        if not rule_id:
            raise ValueError("Protection rule requires a rule-id")

        try:
            rule_type = RuleType(data.get("type", ""))
        except ValueError:
            raise ValueError(f"Protection rule '{rule_id}' has unknown type '{data.get('type')}'")

        patterns: dict[str, Any] = {}
        if data.get("resource-types"):
            patterns["resource_types"] = list(data["resource-types"])
        if data.get("names"):
            patterns["names"] = list(data["names"])
        if data.get("tag-key"):
            patterns["tag_key"] = data["tag-key"]
            patterns["tag_values"] = [_tag_value(v) for v in data.get("tag-values") or []]

        return cls(
            rule_id=rule_id,
            rule_type=rule_type,
            enabled=data.get("enabled", True),
            priority=int(data.get("priority", 100)),
            patterns=patterns,
            description=data.get("description"),
        )


def _tag_value(value: Any) -> str:
    # YAML reads unquoted true/false as booleans
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def _match_any(value: str, patterns: list[str]) -> bool:
    return any(fnmatch.fnmatchcase(value, pattern) for pattern in patterns)
