"""
SigV4 authentication for Amazon Keyspaces (for Apache Cassandra)

This package answers the Keyspaces SigV4 login challenge in memory: it selects
the SigV4 mechanism, then signs the server nonce with AWS credentials.
"""

import logging

from .authenticator import AwsAuthenticator, SigningAuthenticator
from .credentials import (
    CredentialsCallback,
    SigV4Credentials,
    botocore_credentials_callback,
    default_chain_callback,
    resolve_credentials,
    resolve_region,
)
from .exceptions import (
    CredentialResolutionError,
    MalformedChallengeError,
    MissingCredentialsError,
    MissingRegionError,
    SigV4AuthError,
)
from .sigv4 import SIGV4_INITIAL_RESPONSE, build_signed_response, extract_nonce

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
__all__ = [
    "AwsAuthenticator",
    "SigningAuthenticator",
    "SigV4Credentials",
    "CredentialsCallback",
    "SIGV4_INITIAL_RESPONSE",
    "build_signed_response",
    "extract_nonce",
    "resolve_region",
    "resolve_credentials",
    "botocore_credentials_callback",
    "default_chain_callback",
    "SigV4AuthError",
    "MalformedChallengeError",
    "CredentialResolutionError",
    "MissingCredentialsError",
    "MissingRegionError",
]
