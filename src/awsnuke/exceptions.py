"""Exceptions raised by aws-nuke.

Fatal errors (session, blocklist, config, scan) propagate to the caller of
``Nuke.run()``. ``ResourceFiltered`` is raised by a resource's ``filter()`` to
reject itself and never leaves the filter stage.
"""

from __future__ import annotations

from typing import Optional


class NukeError(Exception):
    """Base class for all aws-nuke errors."""


class ConfigError(NukeError):
    """Configuration file is missing required values or cannot be parsed."""


class SessionError(NukeError):
    """No valid credential source could be turned into a session."""


class AccountBlocklistedError(NukeError):
    """The account behind the session is on the configured blocklist."""

    def __init__(self, account_id: str) -> None:
        super().__init__(f"You are trying to nuke the account with the ID {account_id}, but it is blocklisted.")
        self.account_id = account_id


class ScanError(NukeError):
    """A lister failed, so the resource set is incomplete and the run aborts."""

    def __init__(self, resource_type: str, cause: Optional[BaseException] = None) -> None:
        message = f"Failed to list {resource_type}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.resource_type = resource_type


class ResourceFiltered(NukeError):
    """Raised by a resource to exclude itself from removal.

    The message is the human-readable skip reason.
    """
