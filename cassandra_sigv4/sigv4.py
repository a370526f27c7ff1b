"""
SigV4 signing for the Amazon Keyspaces authentication handshake.

The service never receives an HTTP request here. Instead the driver signs a
fixed virtual request (``PUT /authenticate`` against host ``cassandra``) that
embeds a hash of the server nonce, and sends back the signature together with
the metadata the server needs to recompute it.

Every function is pure: given the same inputs it returns the same output, and
a single timestamp is threaded through all of them so the scope, the
credential parameter and the string-to-sign always agree.
"""

import hashlib
import hmac
from datetime import datetime, timezone
from typing import List, Optional
from urllib.parse import quote_plus

from .exceptions import MalformedChallengeError

# Sent in reply to the first challenge to select the SigV4 mechanism.
SIGV4_INITIAL_RESPONSE = b'SigV4\x00\x00'

NONCE_PREFIX = 'nonce='
ALGORITHM = 'AWS4-HMAC-SHA256'
SERVICE = 'cassandra'
TERMINATOR = 'aws4_request'
EXPIRES_SECONDS = 900

AMZ_DATE_FORMAT = '%Y-%m-%dT%H:%M:%S'

_CANONICAL_METHOD = 'PUT'
_CANONICAL_PATH = '/authenticate'
_CANONICAL_HEADERS = f'host:{SERVICE}\n'
_SIGNED_HEADERS = 'host'


def extract_nonce(challenge: Optional[bytes]) -> str:
    """
    Extract the nonce from a challenge payload sent by Amazon Keyspaces.

    Everything after the ``nonce=`` prefix is returned verbatim.

    Raises:
        MalformedChallengeError: if the payload is missing, not UTF-8, or does
            not start with ``nonce=``.
    """
    if challenge is None:
        raise MalformedChallengeError('request does not contain nonce property')
    try:
        text = bytes(challenge).decode('utf-8')
    except UnicodeDecodeError as e:
        raise MalformedChallengeError(f'challenge is not valid UTF-8: {e}') from e
    if not text.startswith(NONCE_PREFIX):
        raise MalformedChallengeError('request does not contain nonce property')
    return text[len(NONCE_PREFIX):]


def _as_utc(t: datetime) -> datetime:
    # naive datetimes are taken to already be UTC
    if t.tzinfo is None:
        return t
    return t.astimezone(timezone.utc).replace(tzinfo=None)


def to_cred_date_stamp(t: datetime) -> str:
    """2020-06-09T22:41:51.000Z -> '20200609'"""
    t = _as_utc(t)
    return f"{t.year}{t.month:02d}{t.day:02d}"


def format_amz_date(t: datetime) -> str:
    """Format ``t`` as ``YYYY-MM-DDTHH:MM:SS.mmmZ``, truncated to milliseconds."""
    t = _as_utc(t)
    return f"{t.strftime(AMZ_DATE_FORMAT)}.{t.microsecond // 1000:03d}Z"


def compute_scope(t: datetime, region: str) -> str:
    return '/'.join([to_cred_date_stamp(t), region, SERVICE, TERMINATOR])


def _sha256_hex(data: str) -> str:
    return hashlib.sha256(data.encode('utf-8')).hexdigest()


def _query_params(access_key_id: str, scope: str, t: datetime) -> List[str]:
    return [
        f"X-Amz-Algorithm={ALGORITHM}",
        f"X-Amz-Credential={access_key_id}%2F{quote_plus(scope, safe='')}",
        f"X-Amz-Date={quote_plus(format_amz_date(t), safe='')}",
        f"X-Amz-Expires={EXPIRES_SECONDS}",
    ]


def form_canonical_request(access_key_id: str, scope: str, t: datetime, nonce: str) -> str:
    # The pairs are sorted as whole "key=value" strings, which is what the
    # service verifies against.
    query_string = '&'.join(sorted(_query_params(access_key_id, scope, t)))
    return '\n'.join([
        _CANONICAL_METHOD,
        _CANONICAL_PATH,
        query_string,
        _CANONICAL_HEADERS,
        _SIGNED_HEADERS,
        _sha256_hex(nonce),
    ])


def _hmac(key: bytes, data: str) -> bytes:
    return hmac.new(key, data.encode('utf-8'), hashlib.sha256).digest()


def derive_signing_key(secret: str, t: datetime, region: str) -> bytes:
    # each step's digest keys the next one
    key = _hmac(f"AWS4{secret}".encode('utf-8'), to_cred_date_stamp(t))
    key = _hmac(key, region)
    key = _hmac(key, SERVICE)
    key = _hmac(key, TERMINATOR)
    return key


def create_string_to_sign(canonical_request: str, t: datetime, scope: str) -> str:
    return '\n'.join([
        ALGORITHM,
        format_amz_date(t),
        scope,
        _sha256_hex(canonical_request),
    ])


def create_signature(canonical_request: str, t: datetime, scope: str, signing_key: bytes) -> str:
    string_to_sign = create_string_to_sign(canonical_request, t, scope)
    return hmac.new(signing_key, string_to_sign.encode('utf-8'), hashlib.sha256).hexdigest()


def build_signed_response(
        region: str,
        nonce: str,
        access_key_id: str,
        secret_access_key: str,
        session_token: Optional[str],
        t: datetime
) -> str:
    """
    Build the response to a SigV4 nonce challenge.

    Args:
        region: AWS region the Keyspaces endpoint lives in.
        nonce: Nonce extracted from the server challenge.
        access_key_id: AWS access key id.
        secret_access_key: AWS secret access key.
        session_token: Optional session token; omitted from the response
            when empty.
        t: Instant to sign with. Used for every derived value.

    Returns:
        ``signature=<hex>,access_key=<id>,amzdate=<date>[,session_token=<token>]``
    """
    scope = compute_scope(t, region)
    canonical_request = form_canonical_request(access_key_id, scope, t, nonce)
    signing_key = derive_signing_key(secret_access_key, t, region)
    signature = create_signature(canonical_request, t, scope, signing_key)

    result = f"signature={signature},access_key={access_key_id},amzdate={format_amz_date(t)}"
    if session_token:
        result += f",session_token={session_token}"
    return result
