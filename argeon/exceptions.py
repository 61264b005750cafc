"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class ArgeonError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(ArgeonError):
    """Raised for issues related to configuration loading, validation or environment."""


class UnsupportedOSError(ConfigurationError):
    """Raised when the host operating system has no known launcher layout."""


class ManifestError(ArgeonError):
    """Raised when the instance list cannot be fetched, parsed or searched."""


class LauncherConfigError(ArgeonError):
    """
    Raised when a launcher's persisted configuration could not be written.

    The underlying error is always chained as ``__cause__``.
    """


class DownloadError(ArgeonError):
    """Raised when a single transfer attempt fails."""


class InstallInProgressError(ArgeonError):
    """Raised when another install of the same instance is already running."""


class LauncherNotInstalledError(ArgeonError):
    """Raised when the third-party launcher executable cannot be located."""
