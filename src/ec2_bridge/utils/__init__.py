"""Utility modules for bridge operations."""

from .decorators import format_success_response, handle_bridge_errors
from .rate_limiter import RateLimiter, TokenBucket
from .validators import (
    validate_endpoint,
    validate_fields,
    validate_required_properties,
    validate_structure,
    validate_timeout,
)

__all__ = [
    "RateLimiter",
    "TokenBucket",
    "format_success_response",
    "handle_bridge_errors",
    "validate_endpoint",
    "validate_fields",
    "validate_required_properties",
    "validate_structure",
    "validate_timeout",
]
