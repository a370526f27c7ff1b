"""
Region and credential resolution for the Keyspaces authenticator.

Nothing here is needed to sign a challenge: the authenticator only consumes a
resolved region and a ``SigV4Credentials`` tuple. These helpers look both up
the way the AWS SDKs do, through the environment and botocore's default
provider chain.
"""

import logging
import os
from typing import Callable, NamedTuple, Optional

import botocore.session
from botocore.credentials import Credentials
from botocore.session import Session

from .exceptions import MissingCredentialsError, MissingRegionError

logger = logging.getLogger(__name__)

# Checked in order; the first non-empty value wins.
REGION_ENV_VARS = ('AWS_DEFAULT_REGION', 'AWS_REGION')


class SigV4Credentials(NamedTuple):
    access_key_id: str
    secret_access_key: str
    session_token: str = ''

    def __repr__(self) -> str:
        return f"SigV4Credentials(access_key_id={self.access_key_id!r})"


# Called at signing time; failures are reported by raising.
CredentialsCallback = Callable[[], SigV4Credentials]


def resolve_region(session: Optional[Session] = None) -> str:
    """
    Resolve the region to sign for.

    ``AWS_DEFAULT_REGION`` takes precedence over ``AWS_REGION``; when neither
    is set, the region from the active botocore profile is used.

    Raises:
        MissingRegionError: if no region is configured anywhere.
    """
    for name in REGION_ENV_VARS:
        region = os.environ.get(name)
        if region:
            logger.debug("Using region %s from %s", region, name)
            return region

    session = session or botocore.session.get_session()
    region = session.get_config_variable('region')
    if not region:
        raise MissingRegionError(
            f"no region configured; set one of {', '.join(REGION_ENV_VARS)} or a profile region"
        )
    logger.debug("Using region %s from botocore configuration", region)
    return region


def freeze_credentials(credentials: Credentials) -> SigV4Credentials:
    # get_frozen_credentials() refreshes RefreshableCredentials when needed
    frozen = credentials.get_frozen_credentials()
    return SigV4Credentials(frozen.access_key, frozen.secret_key, frozen.token or '')


def resolve_credentials(session: Optional[Session] = None) -> SigV4Credentials:
    """
    Resolve credentials from botocore's default provider chain.

    Raises:
        MissingCredentialsError: if no provider in the chain returns credentials.
    """
    session = session or botocore.session.get_session()
    credentials = session.get_credentials()
    if credentials is None:
        raise MissingCredentialsError('no AWS credentials found in the default provider chain')
    logger.debug("Resolved AWS credentials via %s", getattr(credentials, 'method', 'unknown'))
    return freeze_credentials(credentials)


def botocore_credentials_callback(credentials: Credentials) -> CredentialsCallback:
    """Adapt botocore (optionally refreshable) credentials into a callback."""
    def callback() -> SigV4Credentials:
        return freeze_credentials(credentials)
    return callback


def default_chain_callback(session: Optional[Session] = None) -> CredentialsCallback:
    """Callback that walks the default provider chain each time it is called."""
    session = session or botocore.session.get_session()

    def callback() -> SigV4Credentials:
        return resolve_credentials(session)
    return callback
