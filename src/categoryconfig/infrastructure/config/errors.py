from __future__ import annotations


class ConfigStoreError(Exception):
    """Base class for config store errors (user-facing message in args[0])."""


class ConfigKeyNotFoundError(ConfigStoreError):
    """Raised when a key is absent from the active category."""


class ConfigValueConversionError(ConfigStoreError):
    """Raised when a stored value cannot be converted to the requested type."""


class ConfigDocumentError(ConfigStoreError):
    """Raised when the config document is missing, unreadable or malformed."""
