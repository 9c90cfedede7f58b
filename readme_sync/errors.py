"""
errors.py

Responsibility: The error taxonomy shared by every readme-sync module.

All failures of a sync run derive from `SyncError`, so the CLI can map any of
them to a non-zero exit status with a single `except` clause.
"""

from __future__ import annotations


class SyncError(RuntimeError):
    pass


class ConfigError(SyncError):
    """Missing or invalid configuration value."""


class FileReadError(SyncError):
    """The readme file is missing, not a regular file, or not readable as UTF-8."""


class InterpolationError(SyncError):
    """The replacement template references an unknown or malformed placeholder."""


class AuthError(SyncError):
    """The registry rejected the credentials, or no token is available."""


class UploadError(SyncError):
    """The description update failed (network error, timeout, or non-success response)."""
