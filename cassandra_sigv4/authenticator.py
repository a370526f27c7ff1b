"""
Two-step SigV4 authenticator for the Amazon Keyspaces login handshake.

The host driver calls ``AwsAuthenticator.challenge`` when a connection starts.
That selects the SigV4 mechanism and hands back a ``SigningAuthenticator``
bound to a copy of the configuration. The driver then relays the server's
nonce challenge to that signer, which answers with the signed response.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Tuple

from botocore.session import Session

from .credentials import (
    CredentialsCallback,
    SigV4Credentials,
    default_chain_callback,
    resolve_region,
)
from .exceptions import CredentialResolutionError, MissingCredentialsError, MissingRegionError
from .sigv4 import SIGV4_INITIAL_RESPONSE, build_signed_response, extract_nonce


@dataclass(frozen=True)
class AwsAuthenticator:
    """
    Top-level configuration shared by every connection.

    When ``credentials_callback`` is set it is called at signing time and its
    result is used instead of the static credential fields.

    ``current_time`` pins the signing instant and is only meant for tests.
    """
    region: str = ''
    access_key_id: str = ''
    secret_access_key: str = field(default='', repr=False)
    session_token: str = field(default='', repr=False)
    credentials_callback: Optional[CredentialsCallback] = None
    current_time: Optional[datetime] = field(default=None, repr=False)

    @classmethod
    def from_default_chain(cls, session: Optional[Session] = None) -> 'AwsAuthenticator':
        """Region from the environment or profile, credentials from the default chain."""
        return cls.with_region(resolve_region(session), session)

    @classmethod
    def with_region(cls, region: str, session: Optional[Session] = None) -> 'AwsAuthenticator':
        """Explicit region, credentials from the default chain at signing time."""
        return cls.with_credentials_callback(region, default_chain_callback(session))

    @classmethod
    def with_credentials_callback(cls, region: str, callback: CredentialsCallback) -> 'AwsAuthenticator':
        return cls(region=region, credentials_callback=callback)

    def challenge(self, data: Optional[bytes] = None) -> Tuple[bytes, 'SigningAuthenticator']:
        # Each connection gets its own signer so concurrent handshakes never
        # share state.
        signer = SigningAuthenticator(
            region=self.region,
            access_key_id=self.access_key_id,
            secret_access_key=self.secret_access_key,
            session_token=self.session_token,
            credentials_callback=self.credentials_callback,
            current_time=self.current_time,
        )
        return SIGV4_INITIAL_RESPONSE, signer

    def success(self, data: Optional[bytes] = None) -> None:
        return None


@dataclass(frozen=True)
class SigningAuthenticator:
    """Answers a single nonce challenge; there is no next step after it."""
    region: str
    access_key_id: str
    secret_access_key: str = field(repr=False)
    session_token: str = field(repr=False)
    credentials_callback: Optional[CredentialsCallback] = None
    current_time: Optional[datetime] = field(default=None, repr=False)

    def _resolve_credentials(self) -> SigV4Credentials:
        if self.credentials_callback is None:
            return SigV4Credentials(self.access_key_id, self.secret_access_key, self.session_token)
        try:
            return self.credentials_callback()
        except Exception as e:
            raise CredentialResolutionError(e) from e

    def challenge(self, data: Optional[bytes]) -> Tuple[bytes, None]:
        """
        Sign the server nonce.

        Raises:
            MalformedChallengeError: if ``data`` has no ``nonce=`` prefix.
            CredentialResolutionError: if the credentials callback fails.
            MissingRegionError: if no region is configured.
            MissingCredentialsError: if the access key id or secret is empty.
        """
        nonce = extract_nonce(data)

        # frozen for the rest of the call
        t = self.current_time or datetime.now(timezone.utc)

        credentials = self._resolve_credentials()
        if not self.region:
            raise MissingRegionError('region must be set before signing')
        if not credentials.access_key_id or not credentials.secret_access_key:
            raise MissingCredentialsError('access key id and secret access key must be set before signing')

        signed = build_signed_response(
            self.region,
            nonce,
            credentials.access_key_id,
            credentials.secret_access_key,
            credentials.session_token,
            t
        )
        return signed.encode('utf-8'), None

    def success(self, data: Optional[bytes] = None) -> None:
        return None
