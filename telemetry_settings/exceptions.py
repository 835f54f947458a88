"""Errors raised by the installer pipeline.

Every error is fatal; ``main`` maps them to a non-zero exit status.
"""

from pathlib import Path


class InstallerError(Exception):
    """Base class for installer failures."""


class SourceFileParseError(InstallerError):
    """Exception raised when a configuration file cannot be parsed."""

    def __init__(self, path: Path, message: str, line: int | None = None):
        self.path = path
        self.line = line
        location = f"{path}:{line}" if line is not None else str(path)
        super().__init__(f"{location}: {message}")


class MalformedSettingsError(SourceFileParseError):
    """Exception raised when an existing settings document is not usable JSON."""


class UnsupportedPlatformError(InstallerError):
    """Exception raised when no settings directory is known for the platform."""


class SettingsFileError(InstallerError):
    """Exception raised when the settings file cannot be created or replaced."""

    def __init__(self, path: Path, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")


class InvalidOverrideError(InstallerError, ValueError):
    """Exception raised when an override value fails its validation rule."""


class IdentityError(InstallerError):
    """Exception raised when a user identity cannot be determined."""
