"""
Google Drive authentication module.

Loads credentials from the file passed on the command line. Service account
keys and authorized-user files are handled by google-auth directly; OAuth
client secrets run the installed-app flow in a browser. Nothing is cached
between runs.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import google.auth
from google.auth.credentials import Credentials
from google.auth.transport.requests import Request
from google_auth_oauthlib.flow import InstalledAppFlow

from artifact_fetch.config import get_settings
from artifact_fetch.utils.errors import DriveAuthenticationError
from artifact_fetch.utils.logging import get_logger

logger = get_logger(__name__)

# Top-level keys of OAuth client secret files downloaded from Cloud Console
CLIENT_SECRET_KEYS = ("installed", "web")


class GoogleDriveAuth:
    """Load Google credentials for Drive API access."""

    def __init__(
        self,
        credentials_path: Union[str, Path],
        scopes: Optional[List[str]] = None,
    ) -> None:
        """
        Initialize Google Drive authentication.

        Args:
            credentials_path: Path to a credentials JSON file
            scopes: OAuth2 scopes (defaults to settings)
        """
        self.credentials_path = Path(credentials_path)
        self.scopes = scopes or get_settings().drive_scopes

        self._credentials: Optional[Credentials] = None

    @property
    def credentials(self) -> Optional[Credentials]:
        """Get current credentials."""
        return self._credentials

    @property
    def is_authenticated(self) -> bool:
        """Check if credentials have been loaded."""
        return self._credentials is not None

    def authenticate(self) -> Credentials:
        """
        Load credentials from the credentials file.

        Returns:
            Credentials usable by the Drive API client

        Raises:
            DriveAuthenticationError: If the file is missing or invalid
        """
        if not self.credentials_path.is_file():
            raise DriveAuthenticationError(
                f"Credentials file not found: {self.credentials_path}",
                {"credentials_path": str(self.credentials_path)},
            )

        info = self._read_credentials_file()

        try:
            if any(key in info for key in CLIENT_SECRET_KEYS):
                logger.info("Running OAuth2 flow")
                self._credentials = self._run_oauth_flow()
            else:
                self._credentials = self._load_credentials()
        except DriveAuthenticationError:
            raise
        except Exception as e:
            logger.error(f"Authentication failed: {e}")
            raise DriveAuthenticationError(
                f"Failed to authenticate: {e}",
                {"credentials_path": str(self.credentials_path)},
            )

        logger.info("Successfully authenticated with Google Drive")
        return self._credentials

    def _read_credentials_file(self) -> Dict[str, Any]:
        try:
            with open(self.credentials_path, "r", encoding="utf-8") as f:
                info = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise DriveAuthenticationError(
                f"Failed to read credentials file: {e}",
                {"credentials_path": str(self.credentials_path)},
            )

        if not isinstance(info, dict):
            raise DriveAuthenticationError(
                "Credentials file does not contain a JSON object",
                {"credentials_path": str(self.credentials_path)},
            )
        return info

    def _load_credentials(self) -> Credentials:
        """Load service account or authorized user credentials."""
        credentials, _ = google.auth.load_credentials_from_file(
            str(self.credentials_path),
            scopes=self.scopes,
        )

        # Authorized user files may hold an expired access token
        if getattr(credentials, "expired", False) and getattr(credentials, "refresh_token", None):
            logger.info("Refreshing expired token")
            credentials.refresh(Request())

        return credentials

    def _run_oauth_flow(self) -> Credentials:
        """Run the installed-app OAuth2 flow in a browser."""
        flow = InstalledAppFlow.from_client_secrets_file(
            str(self.credentials_path),
            self.scopes,
        )

        return flow.run_local_server(
            port=0,
            authorization_prompt_message="Opening browser for Google Drive authentication...",
            success_message="Authentication successful! You can close this window.",
            open_browser=True,
        )
