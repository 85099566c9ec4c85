"""
Google Drive API client for artifact lookup and download.

This module wraps the three Drive calls the fetch pipeline needs: resolving
a folder by name, listing the files of a given name inside it, and
downloading a file's content.
"""

import io
from typing import Any, Callable, Dict, List, Optional

import httplib2
from google.auth.credentials import Credentials
from google.auth.exceptions import RefreshError, TransportError
from googleapiclient.discovery import Resource, build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseDownload

from artifact_fetch.config import get_settings
from artifact_fetch.models import FileRecord
from artifact_fetch.utils.errors import (
    AmbiguousMatchError,
    DownloadError,
    DriveAuthenticationError,
    DriveNotFoundError,
    GoogleDriveError,
    TooManyResultsError,
)
from artifact_fetch.utils.logging import get_logger, log_performance

logger = get_logger(__name__)

# Connection failures surfaced by the HTTP layer underneath the API client
TRANSPORT_ERRORS = (httplib2.HttpLib2Error, TransportError, OSError)

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"


def quote_query_value(value: str) -> str:
    """Quote a string literal for use in a Drive ``q`` query."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


class GoogleDriveClient:
    """Client for the Drive operations used to fetch artifacts."""

    def __init__(
        self,
        credentials: Credentials,
        page_size: Optional[int] = None,
    ) -> None:
        """
        Initialize Google Drive client.

        Args:
            credentials: Authenticated Google credentials
            page_size: Maximum number of files returned by one listing
        """
        self.settings = get_settings()
        self.credentials = credentials
        self.page_size = page_size or self.settings.page_size

        self._service: Optional[Resource] = None

    def connect(self) -> None:
        """
        Build the Drive v3 service.

        Raises:
            GoogleDriveError: If the service cannot be built
        """
        try:
            self._service = build(
                "drive",
                "v3",
                credentials=self.credentials,
                cache_discovery=False,
            )
            logger.debug("Connected to Google Drive API")
        except Exception as e:
            logger.error(f"Failed to build Drive service: {e}")
            raise GoogleDriveError(f"Failed to connect to Drive API: {e}")

    def ensure_connected(self) -> None:
        """Ensure client is connected to Drive API."""
        if not self._service:
            raise GoogleDriveError("Not connected to Drive API. Call connect() first.")

    def _list(self, query: str, fields: str, failure: str, details: Dict[str, Any]) -> Dict[str, Any]:
        """Run one listing query, mapping API and transport failures."""
        try:
            return self._service.files().list(
                q=query,
                pageSize=self.page_size,
                fields=fields,
            ).execute()
        except RefreshError as e:
            logger.error(f"{failure}: {e}")
            raise DriveAuthenticationError(f"Credentials were rejected: {e}", details)
        except (HttpError,) + TRANSPORT_ERRORS as e:
            logger.error(f"{failure}: {e}")
            raise GoogleDriveError(f"{failure}: {e}", details)

    @log_performance
    def find_folder(self, name: str) -> str:
        """
        Resolve a folder ID by exact name.

        Args:
            name: Folder name

        Returns:
            ID of the only folder with that name

        Raises:
            DriveNotFoundError: If no folder has that name
            AmbiguousMatchError: If several folders have that name
            GoogleDriveError: If the query fails
            DriveAuthenticationError: If the credentials are rejected
        """
        self.ensure_connected()

        query = " and ".join([
            f"name = {quote_query_value(name)}",
            f"mimeType = '{FOLDER_MIME_TYPE}'",
            "trashed = false",
        ])

        response = self._list(
            query,
            "nextPageToken, files(id, name)",
            "Failed to find folder",
            {"name": name},
        )

        folders = response.get("files", [])
        if not folders:
            raise DriveNotFoundError("folder", name)
        if len(folders) > 1:
            raise AmbiguousMatchError("folder", name, len(folders))

        folder_id = folders[0]["id"]
        logger.info(f"Found folder {name} ({folder_id})")
        return folder_id

    @log_performance
    def list_files(self, name: str, parent_id: str) -> List[FileRecord]:
        """
        List non-folder files with an exact name inside a folder.

        Only a single page of results is supported.

        Args:
            name: File name
            parent_id: ID of the containing folder

        Returns:
            Matching file records with their creation times

        Raises:
            DriveNotFoundError: If nothing matches
            TooManyResultsError: If the results span more than one page
            GoogleDriveError: If the query fails
            DriveAuthenticationError: If the credentials are rejected
        """
        self.ensure_connected()

        query = " and ".join([
            f"name = {quote_query_value(name)}",
            f"{quote_query_value(parent_id)} in parents",
            f"mimeType != '{FOLDER_MIME_TYPE}'",
            "trashed = false",
        ])

        response = self._list(
            query,
            "nextPageToken, files(id, name, createdTime)",
            "Failed to list files",
            {"name": name, "parent_id": parent_id},
        )

        if response.get("nextPageToken"):
            raise TooManyResultsError(name, parent_id)

        files = [FileRecord.from_drive(f) for f in response.get("files", [])]
        if not files:
            raise DriveNotFoundError("file", name, parent_id)

        logger.info(f"Found {len(files)} file(s) named {name}")
        return files

    @log_performance
    def download(
        self,
        file_id: str,
        progress_callback: Optional[Callable[[float], None]] = None,
    ) -> bytes:
        """
        Download a file's content into memory.

        Args:
            file_id: Google Drive file ID
            progress_callback: Optional callback receiving percent complete

        Returns:
            Raw file content

        Raises:
            DownloadError: If the transfer fails
            DriveAuthenticationError: If the credentials are rejected
        """
        self.ensure_connected()

        try:
            request = self._service.files().get_media(fileId=file_id)

            file_stream = io.BytesIO()
            downloader = MediaIoBaseDownload(
                file_stream,
                request,
                chunksize=self.settings.download_chunk_size,
            )

            done = False
            while not done:
                status, done = downloader.next_chunk()
                if progress_callback and status:
                    progress_callback(status.progress() * 100)

        except HttpError as e:
            logger.error(f"Failed to download file {file_id}: {e}")
            raise DownloadError(file_id, f"HTTP {e.resp.status}")
        except RefreshError as e:
            logger.error(f"Failed to download file {file_id}: {e}")
            raise DriveAuthenticationError(
                f"Credentials were rejected: {e}",
                {"file_id": file_id},
            )
        except TRANSPORT_ERRORS as e:
            logger.error(f"Failed to download file {file_id}: {e}")
            raise DownloadError(file_id, str(e))

        data = file_stream.getvalue()
        logger.info(f"Downloaded {file_id} ({len(data)} bytes)")
        return data


def create_drive_client(credentials_path: str) -> GoogleDriveClient:
    """Authenticate with a credentials file and return a connected client."""
    from artifact_fetch.google_drive.auth import GoogleDriveAuth

    auth = GoogleDriveAuth(credentials_path)
    client = GoogleDriveClient(auth.authenticate())
    client.connect()
    return client
