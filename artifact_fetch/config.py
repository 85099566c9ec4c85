# Config
"""
Configuration for artifact-fetch.
"""

from pathlib import Path
from typing import Optional


class Settings:
    # Logging
    log_level = "INFO"
    dev_mode = False
    log_file_path: Optional[Path] = None

    # Extraction
    default_destination = "output"
    default_file_mode = 0o666  # entries without stored unix permissions

    # Google Drive
    drive_scopes = ["https://www.googleapis.com/auth/drive.readonly"]
    page_size = 100
    download_chunk_size = 5 * 1024 * 1024  # 5MB

    def get_log_file_path(self):
        return self.log_file_path

# Singleton instance
_settings = None

def get_settings():
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
