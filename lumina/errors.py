"""Lumina application exception hierarchy.

All application errors derive from :class:`LuminaError` so callers can
use a single ``except`` clause when needed.  The gate-facing errors carry
a short, user-presentable message.
"""


class LuminaError(Exception):
    """Base class for all Lumina application errors."""


class ValidationError(LuminaError, ValueError):
    """Password input rejected before any backend call."""


class AuthError(LuminaError):
    """Password verification returned false."""


class SetupError(LuminaError):
    """Storing the initial password failed."""


class UploadError(LuminaError):
    """Asset upload was rejected or returned an unusable response."""


class StorageError(LuminaError):
    """Local key/value storage could not be written."""


class ConfigError(LuminaError):
    """Invalid or missing configuration."""
