"""
Core data models for artifact-fetch.

This module defines the Pydantic models passed between pipeline stages.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from artifact_fetch.config import get_settings

# Unparsable creation times sort before every real instant
OLDEST_INSTANT = datetime.min.replace(tzinfo=timezone.utc)


def parse_rfc3339(value: str) -> Optional[datetime]:
    """
    Parse an RFC3339 timestamp as returned by the Drive API.

    Returns None when the text is not a timestamp or carries no UTC offset.
    """
    if not value:
        return None

    text = value.strip()
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        return None
    return parsed


class FileRecord(BaseModel):
    """Metadata for one file stored in Google Drive."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Google Drive file ID")
    name: str = Field(..., description="File name")
    created_time: str = Field(default="", description="Creation time as RFC3339 text")

    @property
    def created_at(self) -> datetime:
        """Parsed creation time, or the oldest instant when unparsable."""
        return parse_rfc3339(self.created_time) or OLDEST_INSTANT

    @classmethod
    def from_drive(cls, data: Dict[str, Any]) -> "FileRecord":
        """Build a record from a Drive API ``files`` resource."""
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            created_time=data.get("createdTime") or "",
        )


class Options(BaseModel):
    """Validated command-line options for one fetch run."""

    model_config = ConfigDict(frozen=True)

    destination: str = Field(
        default_factory=lambda: get_settings().default_destination,
        description="Directory the artifact is extracted into",
    )
    application: str = Field(default="", description="Application (folder) name")
    version: str = Field(default="", description="Artifact version")
    credentials_file: Optional[str] = Field(
        default=None, description="Google credentials JSON file"
    )

    @property
    def destination_path(self) -> Path:
        """Destination directory as a path."""
        return Path(self.destination)

    @property
    def artifact_name(self) -> str:
        """File name of the artifact in Drive."""
        return f"{self.version}.zip"

    def missing_fields(self) -> List[str]:
        """Names of required options that are empty."""
        missing = []
        if not self.application:
            missing.append("application")
        if not self.version:
            missing.append("version")
        if not self.destination:
            missing.append("destination")
        if not self.credentials_file:
            missing.append("credentials_file")
        return missing

    def is_valid(self) -> bool:
        """Check that all required options are present."""
        return not self.missing_fields()


class FetchResult(BaseModel):
    """Outcome of a successful fetch."""

    artifact: FileRecord
    destination: Path
    size_bytes: int = Field(..., ge=0)
    extracted: List[Path] = Field(default_factory=list)
