"""
Custom exceptions for the asdf-vals plugin.

This module defines domain-specific exceptions that categorize every fatal
condition of the release pipeline. The command-line boundary is the only
place that turns one of these into a process exit status.
"""

from typing import Optional


class PluginError(Exception):
    """
    Base exception for all asdf-vals errors.

    All custom exceptions in asdf-vals inherit from this class so callers can
    catch every plugin failure with a single handler.
    """

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: The primary error message.
            details: Optional additional context about the error.
        """
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(PluginError):
    """Exception raised when configuration is invalid."""

    pass


class ConfigValidationError(ConfigurationError):
    """Exception raised when an environment setting cannot be parsed."""

    pass


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(PluginError):
    """
    Exception raised when caller-supplied input fails validation.

    Attributes:
        field: Name of the input that failed validation.
        value: The rejected value.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details)
        self.field = field
        self.value = value


class InvalidVersion(ValidationError):
    """Exception raised when a version string is not MAJOR.MINOR.PATCH[-pre][+meta]."""

    def __init__(self, version: str, details: Optional[str] = None) -> None:
        super().__init__(
            f"Invalid version format: {version}",
            field="version",
            value=version,
            details=details,
        )


class InvalidInstallType(ValidationError):
    """Exception raised for install types other than a release version."""

    def __init__(self, install_type: str) -> None:
        super().__init__(
            f"asdf-vals supports release installs only (got: {install_type})",
            field="install_type",
            value=install_type,
        )


# =============================================================================
# Download Errors
# =============================================================================


class DownloadError(PluginError):
    """
    Base exception for download-related errors.

    Attributes:
        url: The URL that was being fetched when the error occurred.
        retry_count: Number of attempts made before giving up.
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        retry_count: int = 0,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details)
        self.url = url
        self.retry_count = retry_count


class NetworkError(DownloadError):
    """Exception raised when the remote tag listing cannot be retrieved."""

    pass


class DownloadFailed(DownloadError):
    """Exception raised when a release download fails after all retries."""

    def __init__(
        self, url: str, retry_count: int = 0, details: Optional[str] = None
    ) -> None:
        super().__init__(
            f"Could not download {url}",
            url=url,
            retry_count=retry_count,
            details=details,
        )


# =============================================================================
# Checksum Errors
# =============================================================================


class ChecksumMismatch(PluginError):
    """
    Exception raised when a downloaded file does not match its published digest.

    Unlike a missing manifest, a mismatch is always fatal.
    """

    def __init__(
        self,
        file_path: str,
        expected: Optional[str] = None,
        actual: Optional[str] = None,
    ) -> None:
        filename = file_path.replace("\\", "/").rsplit("/", 1)[-1]
        details = None
        if expected is not None and actual is not None:
            details = f"expected {expected}, got {actual}"
        super().__init__(f"Checksum verification failed for {filename}", details)
        self.file_path = file_path
        self.expected = expected
        self.actual = actual


# =============================================================================
# Archive Errors
# =============================================================================


class ArchiveError(PluginError):
    """
    Exception raised for archive-related errors.

    Attributes:
        archive_path: Path to the problematic archive.
    """

    def __init__(
        self,
        message: str,
        archive_path: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details)
        self.archive_path = archive_path


class ExtractionError(ArchiveError):
    """Exception raised when archive extraction fails."""

    pass


# =============================================================================
# Installation Errors
# =============================================================================


class InstallationError(PluginError):
    """
    Base exception for installation errors.

    Attributes:
        path: The filesystem path involved in the failure.
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details)
        self.path = path


class DownloadDirectoryMissing(InstallationError):
    """Exception raised when the host did not populate the download directory."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Download directory not found: {path}", path=path)


class BinaryNotFound(InstallationError):
    """Exception raised when the expected executable is absent after copying."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Expected binary not found: {path}", path=path)


class InstallationVerificationFailed(InstallationError):
    """Exception raised when the installed binary fails its self-test."""

    def __init__(self, path: str, details: Optional[str] = None) -> None:
        super().__init__(
            "Installation verification failed. Binary may be incompatible with your system.",
            path=path,
            details=details,
        )


class InstallationFailed(InstallationError):
    """Exception raised after a failed installation has been rolled back."""

    pass
