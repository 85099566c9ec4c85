"""
Custom exceptions for artifact-fetch.

This module defines all custom exceptions used throughout the application.
Every failure is terminal: the CLI driver is the only place that turns
them into a process exit.
"""

from typing import Any, Optional


class ArtifactFetchError(Exception):
    """Base exception for all artifact-fetch errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            details: Optional dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def stage(self) -> Optional[str]:
        """Name of the pipeline stage that failed, if known."""
        return self.details.get("stage")

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationError(ArtifactFetchError):
    """Configuration error."""

    pass


class InvalidOptionsError(ConfigurationError):
    """Required command-line options are missing or empty."""

    def __init__(self, missing: list[str]) -> None:
        """Initialize with the names of the missing options."""
        message = f"Missing required options: {', '.join(missing)}"
        super().__init__(message, {"missing": missing})


# =============================================================================
# Google Drive Exceptions
# =============================================================================


class GoogleDriveError(ArtifactFetchError):
    """Base exception for Google Drive operations."""

    pass


class DriveAuthenticationError(GoogleDriveError):
    """Authentication with Google Drive failed."""

    pass


class DriveNotFoundError(GoogleDriveError):
    """No folder or file in Google Drive matched the query."""

    def __init__(self, kind: str, name: str = "", parent_id: Optional[str] = None) -> None:
        """Initialize with what was searched for."""
        if name:
            message = f"No {kind} named '{name}' found in Google Drive"
        else:
            message = f"No {kind} found in Google Drive"
        details: dict[str, Any] = {"kind": kind, "name": name}
        if parent_id:
            details["parent_id"] = parent_id
        super().__init__(message, details)


class AmbiguousMatchError(GoogleDriveError):
    """More than one folder matched a name that must be unique."""

    def __init__(self, kind: str, name: str, count: int) -> None:
        """Initialize with match information."""
        message = f"Found {count} {kind}s named '{name}', expected exactly one"
        super().__init__(message, {"kind": kind, "name": name, "count": count})


class TooManyResultsError(GoogleDriveError):
    """Query result spans more than one page."""

    def __init__(self, name: str, parent_id: str) -> None:
        """Initialize with query information."""
        message = f"Too many files named '{name}' found, pagination is not supported"
        super().__init__(message, {"name": name, "parent_id": parent_id})


class DownloadError(GoogleDriveError):
    """Fetching file content from Google Drive failed."""

    def __init__(self, file_id: str, reason: str) -> None:
        """Initialize with file ID and failure reason."""
        message = f"Failed to download file '{file_id}': {reason}"
        super().__init__(message, {"file_id": file_id})


# =============================================================================
# Archive Exceptions
# =============================================================================


class ArchiveError(ArtifactFetchError):
    """Base exception for archive extraction errors."""

    pass


class ArchiveFormatError(ArchiveError):
    """Downloaded content is not a readable zip archive."""

    pass


class PathTraversalError(ArchiveError):
    """Archive entry would be written outside the destination root."""

    def __init__(self, entry_name: str, destination: str) -> None:
        """Initialize with the offending entry."""
        message = f"Archive entry '{entry_name}' escapes destination '{destination}'"
        super().__init__(message, {"entry": entry_name, "destination": destination})


class ExtractionError(ArchiveError):
    """Creating a directory or file during extraction failed."""

    pass


class CopyError(ArchiveError):
    """Copying an entry's content to disk failed part way."""

    def __init__(self, entry_name: str, reason: str) -> None:
        """Initialize with entry name and failure reason."""
        message = f"Failed to copy content of '{entry_name}': {reason}"
        super().__init__(message, {"entry": entry_name})
