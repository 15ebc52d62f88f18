"""Configuration loading.

Configuration comes from a YAML file, overridden by ``AWS_NUKE_*``
environment variables, overridden in turn by command line options.

Example file:

    region: eu-west-1
    account-blocklist:
      - "123456789012"
    resource-types:
      targets: [EC2Instance, S3Bucket]
      excludes: [IAMUser]
    protection-rules:
      - rule-id: keep-prod
        type: name
        names: ["prod-*"]
        resource-types: [S3Bucket]
        description: Production buckets
      - rule-id: keep-tagged
        type: tag
        tag-key: Protection
        tag-values: ["true"]
    log-level: INFO
    audit-dir: ~/.aws-nuke/audit-logs
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from .exceptions import ConfigError
from .models.protection_rule import ProtectionRule
from .resources import resource_type_names

DEFAULT_REGION = "us-east-1"
DEFAULT_CONFIG_PATH = Path.home() / ".aws-nuke" / "config.yaml"


@dataclass
class NukeConfig:
    """Run configuration.

    Attributes:
        region: Region the session is bound to
        account_blocklist: Account IDs that must never be nuked
        targets: Only nuke these resource types (empty = all)
        excludes: Never nuke these resource types
        protection_rules: Rules that keep matching resources
        log_level: Default log level
        audit_dir: Audit log directory (None = default location)
    """

    region: str = DEFAULT_REGION
    account_blocklist: list[str] = field(default_factory=list)
    targets: list[str] = field(default_factory=list)
    excludes: list[str] = field(default_factory=list)
    protection_rules: list[ProtectionRule] = field(default_factory=list)
    log_level: str = "INFO"
    audit_dir: Optional[str] = None

    @classmethod
    def load(cls, path: Optional[str] = None) -> "NukeConfig":
        """Load configuration from file and environment.

        A missing default config file yields the defaults; an explicitly
        given path must exist.

        Args:
            path: Path of the YAML config file (optional)

        Returns:
            Loaded configuration

        Raises:
            ConfigError: If the file cannot be read or is invalid
        """
        config_path = Path(path).expanduser() if path else DEFAULT_CONFIG_PATH

        data: dict[str, Any] = {}
        if config_path.exists():
            try:
                with open(config_path, "r") as f:
                    data = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigError(f"Unable to read config file {config_path}: {e}") from e
        elif path:
            raise ConfigError(f"Config file {config_path} not found")

        config = cls.from_dict(data)
        config.apply_env()
        return config

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NukeConfig":
        """Build configuration from the parsed YAML document.

        Raises:
            ConfigError: If a value is invalid
        """
        if not isinstance(data, dict):
            raise ConfigError("Config file must contain a mapping")

        resource_types = data.get("resource-types") or {}
        if not isinstance(resource_types, dict):
            raise ConfigError("resource-types must be a mapping with targets and excludes")
        targets = _string_list(resource_types, "targets", "resource-types.targets")
        excludes = _string_list(resource_types, "excludes", "resource-types.excludes")

        known = set(resource_type_names())
        unknown = [name for name in targets + excludes if name not in known]
        if unknown:
            raise ConfigError(f"Unknown resource types in config: {', '.join(unknown)}")

        rule_entries = data.get("protection-rules") or []
        if not isinstance(rule_entries, list):
            raise ConfigError("protection-rules must be a list")
        try:
            rules = [ProtectionRule.from_dict(rule) for rule in rule_entries]
        except (ValueError, AttributeError) as e:
            raise ConfigError(f"Invalid protection rule: {e}") from e

        return cls(
            region=data.get("region") or DEFAULT_REGION,
            account_blocklist=_string_list(data, "account-blocklist", "account-blocklist"),
            targets=targets,
            excludes=excludes,
            protection_rules=rules,
            log_level=str(data.get("log-level", "INFO")).upper(),
            audit_dir=data.get("audit-dir"),
        )

    def apply_env(self) -> None:
        """Override values from AWS_NUKE_* environment variables."""
        if os.environ.get("AWS_NUKE_REGION"):
            self.region = os.environ["AWS_NUKE_REGION"]
        if os.environ.get("AWS_NUKE_LOG_LEVEL"):
            self.log_level = os.environ["AWS_NUKE_LOG_LEVEL"].upper()
        if os.environ.get("AWS_NUKE_AUDIT_DIR"):
            self.audit_dir = os.environ["AWS_NUKE_AUDIT_DIR"]


def _string_list(data: dict[str, Any], key: str, name: str) -> list[str]:
    value = data.get(key) or []
    if not isinstance(value, list):
        raise ConfigError(f"{name} must be a list, got {type(value).__name__}")
    return [str(item) for item in value]
