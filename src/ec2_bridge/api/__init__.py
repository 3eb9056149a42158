"""Amazon EC2 API client modules."""

from .base import SignedQueryClient
from .ec2 import EC2Client
from .responses import parse_describe_instances

__all__ = ["EC2Client", "SignedQueryClient", "parse_describe_instances"]
