from __future__ import annotations


class SnowballError(Exception):
    """Base class for errors raised by the snowball engine."""


class ConfigurationError(SnowballError, ValueError):
    """Missing/unreadable input files or contradictory options. Raised before generating."""


class SanityCheckError(SnowballError, RuntimeError):
    """The loaded tables cannot satisfy the requested configuration."""
