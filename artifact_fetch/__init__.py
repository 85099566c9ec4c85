"""Fetch the newest build artifact for an application from Google Drive."""

__version__ = "0.1.0"
