"""Protection rule evaluation for the filter stage.

A resource that passes its own ``filter()`` can still be kept by a configured
protection rule. The first enabled rule in priority order decides, and its
description (or a generated one) becomes the skip message.
"""

from __future__ import annotations

from typing import Any, Optional

from ..models.event import resource_type_of
from ..models.protection_rule import ProtectionRule, RuleType


class SafetyChecker:
    """Keeps resources that match a protection rule out of the run.

    Attributes:
        rules: Protection rules, lowest priority number first
    """

    def __init__(self, rules: list[ProtectionRule]) -> None:
        self.rules = sorted(rules, key=lambda r: r.priority)

    def matching_rule(self, resource: Any) -> Optional[ProtectionRule]:
        """Return the enabled rule with the highest priority that matches, if any."""
        return next((rule for rule in self.rules if rule.enabled and rule.matches(resource)), None)

    def is_protected(self, resource: Any) -> tuple[bool, Optional[str]]:
        """Check a resource handle against the protection rules.

        Args:
            resource: Resource handle that passed its own filter

        Returns:
            Tuple of (is_protected, reason); reason is None when unprotected
        """
        rule = self.matching_rule(resource)
        if rule is None:
            return False, None

        return True, protection_reason(rule, resource)


def protection_reason(rule: ProtectionRule, resource: Any) -> str:
    """Build the skip message for a resource kept by ``rule``."""
    if rule.description:
        detail = rule.description
    elif rule.rule_type == RuleType.TAG:
        tag_key = rule.patterns.get("tag_key", "")
        detail = f"Tag {tag_key}={(getattr(resource, 'tags', None) or {}).get(tag_key, '')}"
    elif rule.rule_type == RuleType.TYPE:
        detail = f"Resource type {resource_type_of(resource)} protected"
    else:
        detail = f"Name '{resource}' protected"

    return f"{detail} (rule: {rule.rule_id})"
