"""
Tests for Google Drive credential loading.
"""

import json
from unittest.mock import MagicMock, patch

import pytest

from artifact_fetch.google_drive.auth import GoogleDriveAuth
from artifact_fetch.utils.errors import DriveAuthenticationError

SERVICE_ACCOUNT = {
    "type": "service_account",
    "project_id": "builds",
    "client_email": "ci@builds.iam.gserviceaccount.com",
}

CLIENT_SECRET = {
    "installed": {
        "client_id": "id.apps.googleusercontent.com",
        "client_secret": "secret",
        "auth_uri": "https://accounts.google.com/o/oauth2/auth",
        "token_uri": "https://oauth2.googleapis.com/token",
    }
}


@pytest.fixture
def write_credentials(tmp_path):
    def _write(content) -> str:
        path = tmp_path / "credentials.json"
        path.write_text(content if isinstance(content, str) else json.dumps(content))
        return str(path)

    return _write


class TestGoogleDriveAuth:
    """Test the GoogleDriveAuth class."""

    def test_default_scopes(self, tmp_path):
        auth = GoogleDriveAuth(tmp_path / "credentials.json")

        assert auth.scopes == ["https://www.googleapis.com/auth/drive.readonly"]
        assert not auth.is_authenticated

    def test_missing_file(self, tmp_path):
        auth = GoogleDriveAuth(tmp_path / "missing.json")

        with pytest.raises(DriveAuthenticationError, match="not found"):
            auth.authenticate()

    def test_invalid_json(self, write_credentials):
        auth = GoogleDriveAuth(write_credentials("{not json"))

        with pytest.raises(DriveAuthenticationError, match="Failed to read"):
            auth.authenticate()

    def test_non_object_json(self, write_credentials):
        auth = GoogleDriveAuth(write_credentials("[1, 2]"))

        with pytest.raises(DriveAuthenticationError, match="JSON object"):
            auth.authenticate()

    def test_service_account(self, write_credentials):
        path = write_credentials(SERVICE_ACCOUNT)
        credentials = MagicMock(expired=False)

        with patch("google.auth.load_credentials_from_file", return_value=(credentials, "builds")) as loader:
            auth = GoogleDriveAuth(path)
            assert auth.authenticate() is credentials

        loader.assert_called_once_with(path, scopes=auth.scopes)
        assert auth.is_authenticated
        credentials.refresh.assert_not_called()

    def test_expired_authorized_user_is_refreshed(self, write_credentials):
        path = write_credentials({"type": "authorized_user", "refresh_token": "r"})
        credentials = MagicMock(expired=True, refresh_token="r")

        with patch("google.auth.load_credentials_from_file", return_value=(credentials, None)):
            GoogleDriveAuth(path).authenticate()

        credentials.refresh.assert_called_once()

    def test_library_error_is_wrapped(self, write_credentials):
        path = write_credentials({"type": "unknown"})

        with patch("google.auth.load_credentials_from_file", side_effect=ValueError("bad type")):
            with pytest.raises(DriveAuthenticationError, match="bad type"):
                GoogleDriveAuth(path).authenticate()

    def test_client_secret_runs_oauth_flow(self, write_credentials):
        path = write_credentials(CLIENT_SECRET)

        with patch("artifact_fetch.google_drive.auth.InstalledAppFlow") as mock_flow, \
                patch("google.auth.load_credentials_from_file") as loader:
            auth = GoogleDriveAuth(path)
            credentials = auth.authenticate()

        mock_flow.from_client_secrets_file.assert_called_once_with(path, auth.scopes)
        flow = mock_flow.from_client_secrets_file.return_value
        assert credentials is flow.run_local_server.return_value
        loader.assert_not_called()
