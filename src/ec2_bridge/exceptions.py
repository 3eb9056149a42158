"""Common exceptions for the ec2-bridge package."""

from typing import Optional


class BridgeError(Exception):
    """Base class for every error the bridge surfaces to callers."""

    error_code = "unexpected_error"

    def __init__(self, message: str, details: Optional[dict] = None) -> None:
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(BridgeError):
    """Raised when a required bridge property is missing or invalid."""

    error_code = "configuration_error"

    def __init__(self, message: str, missing: Optional[list[str]] = None) -> None:
        super().__init__(message, details={"missing": missing or []})
        self.missing = missing or []


class ParseError(BridgeError):
    """Raised when a qualification cannot be resolved or tokenized."""

    error_code = "invalid_query"


class TransportError(BridgeError):
    """Raised when the query could not be executed against Amazon EC2."""

    error_code = "network_error"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        aws_error_code: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        super().__init__(message, details=details)
        self.status_code = status_code
        self.aws_error_code = aws_error_code


class SigningError(TransportError):
    """Raised when the request signature cannot be computed."""


class RateLimitError(TransportError):
    """Raised when Amazon EC2 throttles the request."""

    error_code = "rate_limit_exceeded"

    def __init__(self, message: str, retry_after: int = 1, status_code: Optional[int] = None) -> None:
        super().__init__(message, status_code=status_code, aws_error_code="RequestLimitExceeded")
        self.retry_after = retry_after


class AmbiguousResultError(BridgeError):
    """Raised when a retrieve matches more than one record."""

    error_code = "multiple_results"

    def __init__(self, message: str, match_count: int) -> None:
        super().__init__(message, details={"match_count": match_count})
        self.match_count = match_count


class MalformedResponseError(BridgeError):
    """Raised when the response payload does not have the expected shape."""

    error_code = "malformed_response"
