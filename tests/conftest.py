"""
Shared fixtures for artifact-fetch tests.
"""

import io
import zipfile
from typing import Dict, Optional
from unittest.mock import MagicMock

import pytest

from artifact_fetch.google_drive.client import GoogleDriveClient
from artifact_fetch.models import FileRecord


def build_zip(entries: Dict[str, Optional[bytes]], modes: Optional[Dict[str, int]] = None) -> bytes:
    """
    Build zip archive bytes in memory.

    Entries mapped to None become directory entries.
    """
    modes = modes or {}
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_STORED) as archive:
        for name, content in entries.items():
            info = zipfile.ZipInfo(name)
            if content is None:
                if not name.endswith("/"):
                    info = zipfile.ZipInfo(name + "/")
                info.external_attr = (0o40755 << 16) | 0x10
                archive.writestr(info, b"")
            else:
                if name in modes:
                    info.external_attr = modes[name] << 16
                archive.writestr(info, content)
    return buffer.getvalue()


@pytest.fixture
def make_zip():
    """Factory for in-memory zip archives."""
    return build_zip


@pytest.fixture
def sample_records():
    """File records with distinct creation times, newest in the middle."""
    return [
        FileRecord(id="old", name="1.2.3.zip", created_time="2024-01-01T10:00:00.000Z"),
        FileRecord(id="new", name="1.2.3.zip", created_time="2024-03-05T08:30:00.000Z"),
        FileRecord(id="mid", name="1.2.3.zip", created_time="2024-02-01T00:00:00.000Z"),
    ]


@pytest.fixture
def drive_service():
    """Mock Drive v3 service resource."""
    return MagicMock()


@pytest.fixture
def drive_client(drive_service):
    """Drive client wired to the mock service."""
    client = GoogleDriveClient(credentials=MagicMock(), page_size=100)
    client._service = drive_service
    return client
