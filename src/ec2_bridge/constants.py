"""Constants and configuration for the Amazon EC2 bridge."""

# Adapter identity
ADAPTER_NAME = "AmazonEC2 Bridge"

# Signature Version 4
SIGNING_ALGORITHM = "AWS4-HMAC-SHA256"
SIGNING_KEY_PREFIX = "AWS4"
SIGNING_REQUEST_SUFFIX = "aws4_request"

# strftime formats, always rendered in UTC
AMZ_DATE_FORMAT = "%Y%m%dT%H%M%SZ"
DATE_STAMP_FORMAT = "%Y%m%d"

DEFAULT_SERVICE = "ec2"
CONTENT_TYPE = "application/x-www-form-urlencoded"

# Default request timeout (seconds)
DEFAULT_TIMEOUT = 30

# Adapter property names (as shown in the bridge configuration screen)
PROPERTY_ACCESS_KEY = "Access Key"
PROPERTY_SECRET_KEY = "Secret Key"
PROPERTY_ENDPOINT = "Endpoint"
PROPERTY_HOST = "Host"
PROPERTY_REGION = "Region"
PROPERTY_ACTION = "Action"
PROPERTY_API_VERSION = "API Version"
PROPERTY_TIMEOUT = "Timeout"

REQUIRED_PROPERTIES = [
    PROPERTY_ACCESS_KEY,
    PROPERTY_SECRET_KEY,
    PROPERTY_ENDPOINT,
    PROPERTY_HOST,
    PROPERTY_REGION,
    PROPERTY_ACTION,
    PROPERTY_API_VERSION,
]

# Environment variables read by BridgeConfig.from_env
ENV_PROPERTIES = {
    PROPERTY_ACCESS_KEY: "AWS_ACCESS_KEY_ID",
    PROPERTY_SECRET_KEY: "AWS_SECRET_ACCESS_KEY",
    PROPERTY_ENDPOINT: "EC2_ENDPOINT",
    PROPERTY_HOST: "EC2_HOST",
    PROPERTY_REGION: "AWS_REGION",
    PROPERTY_ACTION: "EC2_ACTION",
    PROPERTY_API_VERSION: "EC2_API_VERSION",
    PROPERTY_TIMEOUT: "EC2_TIMEOUT",
}

# Structures the bridge can query
SUPPORTED_STRUCTURES = {"instances"}

# Wildcard field in a qualification
WILDCARD = "*"

# DescribeInstances response shape
RESPONSE_ROOT = "DescribeInstancesResponse"
RESERVATION_SET = "reservationSet"
INSTANCES_SET = "instancesSet"
ITEM = "item"
NEXT_TOKEN = "nextToken"
NEXT_TOKEN_PARAM = "NextToken"

# Client-side rate limits (requests per second, burst capacity).
# EC2 throttles per action with a token bucket of its own.
DEFAULT_RATE_LIMITS = {
    "DescribeInstances": (20, 100),
}
FALLBACK_RATE_LIMIT = (5, 50)

# Upstream error codes that indicate throttling
THROTTLING_ERROR_CODES = {"RequestLimitExceeded", "Throttling", "ThrottlingException"}
