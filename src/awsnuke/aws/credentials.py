"""Credential validation against STS."""

from __future__ import annotations

import logging
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..exceptions import AccountBlocklistedError, SessionError

logger = logging.getLogger(__name__)


def validate_credentials(session: boto3.Session) -> dict[str, str]:
    """Check that the session's credentials work.

    Args:
        session: Session to validate

    Returns:
        Dictionary with account_id, arn and user_id of the caller

    Raises:
        SessionError: If the credentials are missing or rejected
    """
    try:
        identity = session.client("sts").get_caller_identity()
    except (ClientError, BotoCoreError) as e:
        raise SessionError(f"Unable to validate credentials: {e}") from e

    return {
        "account_id": identity["Account"],
        "arn": identity["Arn"],
        "user_id": identity["UserId"],
    }


def get_account_alias(session: boto3.Session) -> Optional[str]:
    """Return the first IAM account alias, or None if the account has none."""
    try:
        aliases = session.client("iam").list_account_aliases().get("AccountAliases", [])
    except ClientError as e:
        logger.debug(f"Unable to read account aliases: {e}")
        return None

    return aliases[0] if aliases else None


def check_account_blocklist(account_id: str, blocklist: list[str]) -> None:
    """Refuse to run against blocklisted accounts.

    Raises:
        AccountBlocklistedError: If the account is on the blocklist
    """
    if account_id in blocklist:
        raise AccountBlocklistedError(account_id)
