"""Exceptions raised by the config module."""


class ConfigError(Exception):
    """Raised when a settings source cannot be read or holds invalid values."""
