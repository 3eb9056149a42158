"""Bridge configuration loaded from adapter properties or the environment."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional
from urllib.parse import urlparse

from dotenv import load_dotenv

from .constants import (
    DEFAULT_SERVICE,
    DEFAULT_TIMEOUT,
    ENV_PROPERTIES,
    PROPERTY_ACCESS_KEY,
    PROPERTY_ACTION,
    PROPERTY_API_VERSION,
    PROPERTY_ENDPOINT,
    PROPERTY_HOST,
    PROPERTY_REGION,
    PROPERTY_SECRET_KEY,
    PROPERTY_TIMEOUT,
)
from .exceptions import ConfigurationError
from .utils.validators import validate_endpoint, validate_required_properties, validate_timeout


@dataclass(frozen=True)
class BridgeConfig:
    """Validated, immutable settings for one bridge instance.

    Credentials are excluded from ``repr`` so the config can be logged.
    """

    access_key: str = field(repr=False)
    secret_key: str = field(repr=False)
    endpoint: str
    host: str
    region: str
    action: str
    api_version: str
    service: str = DEFAULT_SERVICE
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        """Validate every construction path, not only the factory methods.

        Raises:
            ConfigurationError: If a required value is blank, the endpoint is not
                an http(s) URL or the timeout is not a positive number
        """
        is_valid, missing = validate_required_properties(
            {
                PROPERTY_ACCESS_KEY: self.access_key,
                PROPERTY_SECRET_KEY: self.secret_key,
                PROPERTY_ENDPOINT: self.endpoint,
                PROPERTY_HOST: self.host,
                PROPERTY_REGION: self.region,
                PROPERTY_ACTION: self.action,
                PROPERTY_API_VERSION: self.api_version,
            }
        )
        if not is_valid:
            raise ConfigurationError(
                f"Missing required bridge properties: {', '.join(missing)}",
                missing=missing,
            )
        if not validate_endpoint(self.endpoint):
            raise ConfigurationError(f"Invalid endpoint URL: {self.endpoint}")
        if validate_timeout(self.timeout) is None:
            raise ConfigurationError(f"Invalid timeout: {self.timeout}")

    @classmethod
    def from_properties(cls, properties: Mapping[str, Any]) -> "BridgeConfig":
        """Build a config from adapter properties.

        Args:
            properties: Mapping keyed by property name ("Access Key", "Region", ...)

        Returns:
            A validated BridgeConfig

        Raises:
            ConfigurationError: If a required property is missing or a value is invalid
        """
        is_valid, missing = validate_required_properties(properties)
        if not is_valid:
            raise ConfigurationError(
                f"Missing required bridge properties: {', '.join(missing)}",
                missing=missing,
            )

        timeout: Optional[float] = DEFAULT_TIMEOUT
        if properties.get(PROPERTY_TIMEOUT) not in (None, ""):
            timeout = validate_timeout(properties[PROPERTY_TIMEOUT])
            if timeout is None:
                raise ConfigurationError(f"Invalid timeout: {properties[PROPERTY_TIMEOUT]}")

        return cls(
            access_key=str(properties[PROPERTY_ACCESS_KEY]).strip(),
            secret_key=str(properties[PROPERTY_SECRET_KEY]).strip(),
            endpoint=str(properties[PROPERTY_ENDPOINT]).strip(),
            host=str(properties[PROPERTY_HOST]).strip(),
            region=str(properties[PROPERTY_REGION]).strip(),
            action=str(properties[PROPERTY_ACTION]).strip(),
            api_version=str(properties[PROPERTY_API_VERSION]).strip(),
            timeout=timeout,
        )

    @classmethod
    def from_env(cls) -> "BridgeConfig":
        """Build a config from environment variables (and a .env file if present).

        ``EC2_HOST`` falls back to the network location of ``EC2_ENDPOINT``.
        """
        load_dotenv()

        properties = {name: os.getenv(variable) for name, variable in ENV_PROPERTIES.items()}
        if not properties[PROPERTY_HOST] and properties[PROPERTY_ENDPOINT]:
            properties[PROPERTY_HOST] = urlparse(properties[PROPERTY_ENDPOINT]).netloc

        return cls.from_properties(properties)
