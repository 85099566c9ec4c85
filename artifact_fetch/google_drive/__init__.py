from artifact_fetch.google_drive.auth import GoogleDriveAuth
from artifact_fetch.google_drive.client import GoogleDriveClient, create_drive_client

__all__ = ["GoogleDriveAuth", "GoogleDriveClient", "create_drive_client"]
