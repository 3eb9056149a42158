"""Amazon EC2 bridge: count, retrieve and search instances with qualification queries."""

__version__ = "1.0.0"
