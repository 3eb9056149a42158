"""AWS Signature Version 4 signing for EC2 query requests.

Everything in this module is pure: no I/O, no logging and no state kept
between calls, so it can be used from any number of threads at once.
"""

import hashlib
import hmac
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from .constants import (
    AMZ_DATE_FORMAT,
    DATE_STAMP_FORMAT,
    SIGNING_ALGORITHM,
    SIGNING_KEY_PREFIX,
    SIGNING_REQUEST_SUFFIX,
)
from .exceptions import SigningError

EMPTY_PAYLOAD_HASH = hashlib.sha256(b"").hexdigest()


@dataclass(frozen=True)
class SigningScope:
    """Date/region/service tuple a derived signing key is valid for."""

    date_stamp: str
    region: str
    service: str

    @property
    def credential_scope(self) -> str:
        return f"{self.date_stamp}/{self.region}/{self.service}/{SIGNING_REQUEST_SUFFIX}"


@dataclass(frozen=True)
class CanonicalRequest:
    """Deterministic text form of one HTTP request, used only as signing input."""

    method: str
    path: str
    canonical_query_string: str
    canonical_headers: str
    signed_header_names: str
    payload_hash: str = EMPTY_PAYLOAD_HASH

    def serialize(self) -> str:
        # canonical_headers ends with a newline, so a blank line separates
        # the header block from the signed header names.
        return "\n".join(
            [
                self.method,
                self.path,
                self.canonical_query_string,
                self.canonical_headers,
                self.signed_header_names,
                self.payload_hash,
            ]
        )


def request_timestamps(now: Optional[datetime] = None) -> tuple[str, str]:
    """Capture one UTC instant as an ``x-amz-date`` value and a date stamp.

    Args:
        now: Instant to format, defaults to the current time

    Returns:
        Tuple of (amz_date, date_stamp), e.g. ("20240102T030405Z", "20240102")
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.strftime(AMZ_DATE_FORMAT), now.strftime(DATE_STAMP_FORMAT)


def canonical_headers(headers: dict[str, str]) -> tuple[str, str]:
    """Build the canonical header block and signed header list.

    Args:
        headers: Header names and values to sign

    Returns:
        Tuple of (canonical_headers, signed_header_names)
    """
    normalized = sorted((name.strip().lower(), " ".join(value.split())) for name, value in headers.items())
    block = "".join(f"{name}:{value}\n" for name, value in normalized)
    signed = ";".join(name for name, _ in normalized)
    return block, signed


def sha256_hex(data: str) -> str:
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def hmac_sha256(key: bytes, message: str) -> bytes:
    try:
        return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()
    except (TypeError, AttributeError, UnicodeEncodeError) as e:
        raise SigningError(f"Unable to compute HMAC-SHA256: {e}") from e


def derive_signing_key(secret_key: str, scope: SigningScope) -> bytes:
    """Derive the per-request signing key through the four-stage HMAC chain.

    Args:
        secret_key: AWS secret access key
        scope: Credential scope the key is restricted to

    Returns:
        32-byte signing key

    Raises:
        SigningError: If the key material cannot be used
    """
    if not isinstance(secret_key, str):
        raise SigningError("Secret key must be a string")
    try:
        k_secret = (SIGNING_KEY_PREFIX + secret_key).encode("utf-8")
    except UnicodeEncodeError as e:
        raise SigningError(f"Secret key cannot be encoded: {e}") from e

    k_date = hmac_sha256(k_secret, scope.date_stamp)
    k_region = hmac_sha256(k_date, scope.region)
    k_service = hmac_sha256(k_region, scope.service)
    return hmac_sha256(k_service, SIGNING_REQUEST_SUFFIX)


def build_string_to_sign(amz_date: str, scope: SigningScope, canonical_request: CanonicalRequest) -> str:
    return "\n".join(
        [
            SIGNING_ALGORITHM,
            amz_date,
            scope.credential_scope,
            sha256_hex(canonical_request.serialize()),
        ]
    )


def sign(secret_key: str, scope: SigningScope, canonical_request: CanonicalRequest, amz_date: str) -> str:
    """Compute the Signature Version 4 signature of a canonical request.

    ``amz_date`` must be the same instant used for the ``x-amz-date`` header
    inside ``canonical_request`` and for ``scope.date_stamp``; a mismatch is
    only detected by the remote service.

    Args:
        secret_key: AWS secret access key
        scope: Credential scope (date stamp, region, service)
        canonical_request: Request description to sign
        amz_date: Request timestamp in ``YYYYMMDDTHHMMSSZ`` form

    Returns:
        Lowercase hex signature

    Raises:
        SigningError: If any cryptographic step fails
    """
    signing_key = derive_signing_key(secret_key, scope)
    string_to_sign = build_string_to_sign(amz_date, scope, canonical_request)
    return hmac_sha256(signing_key, string_to_sign).hex()


def build_authorization_header(access_key: str, scope: SigningScope, signed_header_names: str, signature: str) -> str:
    return (
        f"{SIGNING_ALGORITHM} Credential={access_key}/{scope.credential_scope}, "
        f"SignedHeaders={signed_header_names}, Signature={signature}"
    )
