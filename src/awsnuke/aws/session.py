"""boto3 session construction.

A run authenticates with either a shared credentials profile or a static key
pair. The session is built once, before any lister runs.
"""

from __future__ import annotations

import logging

import boto3
from botocore.exceptions import ProfileNotFound

from ..exceptions import SessionError
from ..models.parameters import NukeParameters

logger = logging.getLogger(__name__)


def create_session(parameters: NukeParameters, region: str) -> boto3.Session:
    """Create the session shared by all listers and resources of a run.

    Args:
        parameters: Run parameters carrying the credential source
        region: Region the session is bound to

    Returns:
        boto3 session bound to the region

    Raises:
        SessionError: If no or conflicting credential sources are configured,
            or the profile does not exist
    """
    try:
        parameters.validate()
    except ValueError as e:
        raise SessionError(str(e)) from e

    if parameters.has_profile():
        try:
            session = boto3.Session(profile_name=parameters.profile, region_name=region)
        except ProfileNotFound as e:
            raise SessionError(f"Unable to create session with profile '{parameters.profile}'.") from e

        logger.debug(f"Using profile {parameters.profile} in {region}")
        return session

    if parameters.has_keys():
        logger.debug(f"Using access key {parameters.access_key_id} in {region}")
        return boto3.Session(
            aws_access_key_id=parameters.access_key_id,
            aws_secret_access_key=parameters.secret_access_key,
            aws_session_token=parameters.session_token,
            region_name=region,
        )

    raise SessionError("You have to specify a profile or credentials.")
