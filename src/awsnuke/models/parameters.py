"""Command line parameters for a nuke run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class NukeParameters:
    """Parameters supplied by the operator for a single run.

    A run authenticates either with a named profile or with a static key pair,
    never both.

    Attributes:
        profile: AWS shared credentials profile (optional)
        access_key_id: Static access key ID (optional)
        secret_access_key: Static secret access key (optional)
        session_token: Session token for temporary static credentials (optional)
        region: Region override, takes precedence over the config file (optional)
        no_dry_run: Actually delete resources instead of only listing them
        retry: Retry failed resources until none are left
        wait: Wait for asynchronous removals to complete
        max_retries: Stop retrying after this many passes (None = unbounded)
        force: Skip the interactive confirmation in execute mode
        targets: Only nuke these resource types (optional)
        excludes: Never nuke these resource types (optional)
    """

    profile: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    session_token: Optional[str] = None
    region: Optional[str] = None
    no_dry_run: bool = False
    retry: bool = True
    wait: bool = True
    max_retries: Optional[int] = None
    force: bool = False
    targets: list[str] = field(default_factory=list)
    excludes: list[str] = field(default_factory=list)

    def has_profile(self) -> bool:
        return bool(self.profile and self.profile.strip())

    def has_keys(self) -> bool:
        return bool(self.access_key_id and self.access_key_id.strip()) and bool(
            self.secret_access_key and self.secret_access_key.strip()
        )

    def validate(self) -> bool:
        """Validate parameter combinations.

        Returns:
            True if validation passes

        Raises:
            ValueError: If any validation rule fails
        """
        if self.has_profile() and (self.access_key_id or self.secret_access_key or self.session_token):
            raise ValueError("You have to specify a profile or credentials, not both.")

        if bool(self.access_key_id) != bool(self.secret_access_key):
            raise ValueError("Access key ID and secret access key must be specified together.")

        if self.session_token and not self.has_keys():
            raise ValueError("A session token requires an access key ID and secret access key.")

        if self.max_retries is not None and self.max_retries < 0:
            raise ValueError("max_retries cannot be negative")

        return True
