"""
Error taxonomy for USQ metadata access.

All errors are fatal for the call that raised them; nothing here is retried.
"""


class USQError(Exception):
    """Base class for errors raised by usq_utils."""


class ConfigurationError(USQError, ValueError):
    """A parameter value is missing or not one of the accepted values."""


class NotFoundError(USQError, LookupError):
    """A column, identifier or stored object does not exist."""


class ValidationError(USQError, ValueError):
    """A value is incompatible with the type or levels of its target column."""
