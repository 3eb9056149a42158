"""Base API client for signed Amazon EC2 query requests."""

import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, Dict, Optional
from urllib.parse import quote, urlparse
from xml.parsers.expat import ExpatError

import requests
import xmltodict

from ..config import BridgeConfig
from ..constants import CONTENT_TYPE, THROTTLING_ERROR_CODES
from ..exceptions import RateLimitError, TransportError
from ..signing import (
    EMPTY_PAYLOAD_HASH,
    CanonicalRequest,
    SigningScope,
    build_authorization_header,
    canonical_headers,
    request_timestamps,
    sign,
)
from ..utils.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

CONNECTION_ERROR_MESSAGE = "Unable to make a connection to properly execute the query to Amazon EC2"


def canonical_query_string(params: Dict[str, str]) -> str:
    """Encode query parameters the way Signature Version 4 expects.

    Names and values are percent-encoded (RFC 3986 unreserved characters
    left alone) and the pairs are sorted by name.
    """
    encoded = sorted((quote(str(k), safe="-_.~"), quote(str(v), safe="-_.~")) for k, v in params.items())
    return "&".join(f"{k}={v}" for k, v in encoded)


def parse_error_body(body: str) -> tuple[Optional[str], Optional[str]]:
    """Pull the first error code and message out of an EC2 error document."""
    try:
        document = xmltodict.parse(body)
    except (ExpatError, TypeError, ValueError):
        return None, None

    error = (document.get("Response") or {}).get("Errors") if isinstance(document, dict) else None
    error = (error or {}).get("Error") if isinstance(error, dict) else None
    if isinstance(error, list):
        error = error[0] if error else None
    if not isinstance(error, dict):
        return None, None
    return error.get("Code"), error.get("Message")


class SignedQueryClient(ABC):
    """Base class for clients of the EC2 query API."""

    def __init__(
        self,
        config: BridgeConfig,
        session: Optional[requests.Session] = None,
        rate_limiter: Optional[RateLimiter] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Validated bridge configuration
            session: HTTP session to send requests with
            rate_limiter: Client-side limiter shared between clients
            clock: Returns the current UTC time, used for request timestamps
        """
        self.config = config
        self.session = session or requests.Session()
        self.rate_limiter = rate_limiter or RateLimiter()
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    @abstractmethod
    def get_action(self) -> str:
        """Return the EC2 API action this client calls."""
        pass

    def build_signed_request(self, params: Optional[Dict[str, str]] = None) -> tuple[str, Dict[str, str]]:
        """Build the URL and headers of one signed GET request.

        The timestamp is captured once here and used for the canonical
        request, the credential scope and the ``x-amz-date`` header.

        Args:
            params: Extra query parameters besides Action and Version

        Returns:
            Tuple of (url, headers)

        Raises:
            SigningError: If the signature cannot be computed
        """
        amz_date, date_stamp = request_timestamps(self.clock())

        query = {"Action": self.get_action(), "Version": self.config.api_version}
        query.update(params or {})
        query_string = canonical_query_string(query)

        header_block, signed_headers = canonical_headers({"host": self.config.host, "x-amz-date": amz_date})
        canonical_request = CanonicalRequest(
            method="GET",
            path=urlparse(self.config.endpoint).path or "/",
            canonical_query_string=query_string,
            canonical_headers=header_block,
            signed_header_names=signed_headers,
            payload_hash=EMPTY_PAYLOAD_HASH,
        )
        scope = SigningScope(date_stamp=date_stamp, region=self.config.region, service=self.config.service)
        signature = sign(self.config.secret_key, scope, canonical_request, amz_date)

        headers = {
            "Content-Type": CONTENT_TYPE,
            "x-amz-date": amz_date,
            "Authorization": build_authorization_header(self.config.access_key, scope, signed_headers, signature),
        }
        return f"{self.config.endpoint}?{query_string}", headers

    def execute_signed_query(self, params: Optional[Dict[str, str]] = None) -> str:
        """Sign and send one query, returning the raw response body.

        Every call signs afresh, so retrying a failed call never reuses an
        expired timestamp.

        Raises:
            SigningError: If signing fails; nothing is sent
            RateLimitError: When EC2 throttles the request
            TransportError: For connection failures and non-2xx responses
        """
        request_id = str(uuid.uuid4())
        start_time = datetime.now()
        action = self.get_action()

        logger.info(f"Request {request_id}: Starting {action}")

        self.rate_limiter.wait_if_needed(action)
        url, headers = self.build_signed_request(params)

        try:
            response = self.session.get(url, headers=headers, timeout=self.config.timeout)
        except requests.RequestException as e:
            duration_ms = int((datetime.now() - start_time).total_seconds() * 1000)
            logger.error(f"Request {request_id}: Connection error in {duration_ms}ms: {e}")
            raise TransportError(CONNECTION_ERROR_MESSAGE) from e

        duration_ms = int((datetime.now() - start_time).total_seconds() * 1000)

        if not response.ok:
            aws_code, aws_message = parse_error_body(response.text)
            logger.error(
                f"Request {request_id}: HTTP error in {duration_ms}ms, "
                f"status={response.status_code}, code={aws_code}"
            )
            if response.status_code == 503 or aws_code in THROTTLING_ERROR_CODES:
                retry_after = str(response.headers.get("Retry-After", ""))
                raise RateLimitError(
                    aws_message or "Request limit exceeded",
                    retry_after=int(retry_after) if retry_after.isdigit() else 1,
                    status_code=response.status_code,
                )
            raise TransportError(
                f"{CONNECTION_ERROR_MESSAGE}: {aws_message or response.reason}",
                status_code=response.status_code,
                aws_error_code=aws_code,
            )

        logger.info(f"Request {request_id}: Success in {duration_ms}ms, status={response.status_code}")
        return response.text
