"""Input validation utilities for bridge properties and requests."""

from collections.abc import Mapping
from typing import Any, List, Optional
from urllib.parse import urlparse

from ..constants import REQUIRED_PROPERTIES, SUPPORTED_STRUCTURES


def validate_required_properties(properties: Mapping[str, Any]) -> tuple[bool, List[str]]:
    """Check that every required bridge property is present and non-blank.

    Args:
        properties: Property name to value mapping

    Returns:
        Tuple of (is_valid, list_of_missing_property_names)
    """
    missing = [
        name
        for name in REQUIRED_PROPERTIES
        if properties.get(name) is None or not str(properties.get(name)).strip()
    ]
    return len(missing) == 0, missing


def validate_endpoint(endpoint: str) -> bool:
    """Validate that the endpoint is an absolute http(s) URL.

    Args:
        endpoint: Endpoint URL to validate

    Returns:
        True if the endpoint is usable
    """
    if not endpoint:
        return False
    parsed = urlparse(endpoint)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def validate_timeout(timeout: Any) -> Optional[float]:
    """Convert a timeout property to seconds.

    Args:
        timeout: Timeout value as a number or numeric string

    Returns:
        Positive timeout in seconds, or None if the value is invalid
    """
    try:
        seconds = float(timeout)
    except (TypeError, ValueError):
        return None
    return seconds if seconds > 0 else None


def validate_structure(structure: Optional[str]) -> bool:
    """Validate that the bridge can query the requested structure."""
    return bool(structure) and structure.strip().lower() in SUPPORTED_STRUCTURES


def validate_fields(fields: Any) -> bool:
    """Validate a field list: None, or a list of non-empty strings."""
    if fields is None:
        return True
    return isinstance(fields, list) and all(isinstance(field, str) and field for field in fields)
