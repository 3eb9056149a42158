"""Tests for bridge configuration loading and validation."""

from unittest.mock import patch

import pytest

from conftest import ACCESS_KEY, SECRET_KEY
from ec2_bridge.config import BridgeConfig
from ec2_bridge.exceptions import ConfigurationError
from ec2_bridge.utils.validators import (
    validate_endpoint,
    validate_fields,
    validate_required_properties,
    validate_structure,
    validate_timeout,
)

ENVIRONMENT = {
    "AWS_ACCESS_KEY_ID": ACCESS_KEY,
    "AWS_SECRET_ACCESS_KEY": SECRET_KEY,
    "EC2_ENDPOINT": "https://ec2.eu-west-1.amazonaws.com",
    "AWS_REGION": "eu-west-1",
    "EC2_ACTION": "DescribeInstances",
    "EC2_API_VERSION": "2016-11-15",
}


class TestFromProperties:
    """Test building a config from adapter properties."""

    def test_all_properties(self, properties):
        config = BridgeConfig.from_properties(properties)

        assert config.access_key == ACCESS_KEY
        assert config.secret_key == SECRET_KEY
        assert config.region == "us-east-1"
        assert config.service == "ec2"
        assert config.timeout == 30

    def test_secrets_not_in_repr(self, properties):
        text = repr(BridgeConfig.from_properties(properties))
        assert SECRET_KEY not in text
        assert ACCESS_KEY not in text
        assert "us-east-1" in text

    def test_missing_properties_listed(self, properties):
        del properties["Secret Key"]
        properties["Region"] = "  "

        with pytest.raises(ConfigurationError) as exc_info:
            BridgeConfig.from_properties(properties)

        assert exc_info.value.missing == ["Secret Key", "Region"]

    def test_invalid_endpoint(self, properties):
        properties["Endpoint"] = "ec2.us-east-1.amazonaws.com"
        with pytest.raises(ConfigurationError):
            BridgeConfig.from_properties(properties)

    def test_timeout_property(self, properties):
        properties["Timeout"] = "12.5"
        assert BridgeConfig.from_properties(properties).timeout == 12.5

    def test_invalid_timeout(self, properties):
        properties["Timeout"] = "-1"
        with pytest.raises(ConfigurationError):
            BridgeConfig.from_properties(properties)


class TestDirectConstruction:
    """Test validation when the dataclass is built directly."""

    ARGUMENTS = {
        "access_key": ACCESS_KEY,
        "secret_key": SECRET_KEY,
        "endpoint": "https://ec2.us-east-1.amazonaws.com",
        "host": "ec2.us-east-1.amazonaws.com",
        "region": "us-east-1",
        "action": "DescribeInstances",
        "api_version": "2016-11-15",
    }

    def test_valid_arguments(self):
        assert BridgeConfig(**self.ARGUMENTS).timeout == 30

    def test_blank_credentials_rejected(self):
        with pytest.raises(ConfigurationError) as exc_info:
            BridgeConfig(**dict(self.ARGUMENTS, access_key="", secret_key=" "))

        assert exc_info.value.missing == ["Access Key", "Secret Key"]

    def test_invalid_endpoint_rejected(self):
        with pytest.raises(ConfigurationError):
            BridgeConfig(**dict(self.ARGUMENTS, endpoint="ec2.us-east-1.amazonaws.com"))

    def test_non_positive_timeout_rejected(self):
        with pytest.raises(ConfigurationError):
            BridgeConfig(**dict(self.ARGUMENTS, timeout=0))


class TestFromEnv:
    """Test building a config from environment variables."""

    @patch("ec2_bridge.config.load_dotenv")
    def test_host_defaults_to_endpoint_netloc(self, mock_load_dotenv):
        with patch.dict("os.environ", ENVIRONMENT, clear=True):
            config = BridgeConfig.from_env()

        mock_load_dotenv.assert_called_once()
        assert config.host == "ec2.eu-west-1.amazonaws.com"
        assert config.region == "eu-west-1"

    @patch("ec2_bridge.config.load_dotenv")
    def test_explicit_host_and_timeout(self, mock_load_dotenv):
        environment = dict(ENVIRONMENT, EC2_HOST="ec2.internal", EC2_TIMEOUT="5")
        with patch.dict("os.environ", environment, clear=True):
            config = BridgeConfig.from_env()

        assert config.host == "ec2.internal"
        assert config.timeout == 5.0

    @patch("ec2_bridge.config.load_dotenv")
    def test_missing_environment(self, mock_load_dotenv):
        with patch.dict("os.environ", {}, clear=True):
            with pytest.raises(ConfigurationError) as exc_info:
                BridgeConfig.from_env()

        assert "Access Key" in exc_info.value.missing
        assert "Host" in exc_info.value.missing


class TestValidators:
    """Test standalone validators."""

    def test_validate_required_properties(self, properties):
        assert validate_required_properties(properties) == (True, [])
        assert validate_required_properties({}) == (
            False,
            ["Access Key", "Secret Key", "Endpoint", "Host", "Region", "Action", "API Version"],
        )

    def test_validate_endpoint(self):
        assert validate_endpoint("https://ec2.amazonaws.com") is True
        assert validate_endpoint("http://localhost:4566") is True
        assert validate_endpoint("ftp://ec2.amazonaws.com") is False
        assert validate_endpoint("") is False

    def test_validate_timeout(self):
        assert validate_timeout("30") == 30.0
        assert validate_timeout(0) is None
        assert validate_timeout("soon") is None
        assert validate_timeout(None) is None

    def test_validate_structure(self):
        assert validate_structure("Instances") is True
        assert validate_structure(" instances ") is True
        assert validate_structure("Volumes") is False
        assert validate_structure("") is False
        assert validate_structure(None) is False

    def test_validate_fields(self):
        assert validate_fields(None) is True
        assert validate_fields(["instanceId"]) is True
        assert validate_fields([]) is True
        assert validate_fields("instanceId") is False
        assert validate_fields(["instanceId", ""]) is False
