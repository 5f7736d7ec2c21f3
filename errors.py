"""Exceptions shared by the order load test tools."""


class ConfigurationError(ValueError):
    """Invalid run configuration. Raised before any request is sent."""
