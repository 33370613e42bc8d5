"""Google Drive client - builds the app-data and quota metadata requests polled by the prober."""

from __future__ import annotations

import io
import logging

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.http import HttpRequest, MediaIoBaseUpload

logger = logging.getLogger(__name__)

APP_DATA_FOLDER = "appDataFolder"
MARKER_FILE_NAME = "file.txt"
QUOTA_FIELDS = "storageQuota/limit, storageQuota/usage"


class GDriveClient:
    """Wraps the Google Drive v3 API.

    Methods return unexecuted ``HttpRequest`` objects so callers can log the
    outbound request before calling ``execute()``.
    """

    def __init__(self, credentials: Credentials, service=None):
        self._service = service or build(
            "drive", "v3", credentials=credentials, cache_discovery=False
        )

    def create_marker_file_request(self, name: str = MARKER_FILE_NAME) -> HttpRequest:
        """Request creating an empty text file in the application-data folder, returning only its id."""
        media = MediaIoBaseUpload(io.BytesIO(b""), mimetype="text/plain")
        meta = {"name": name, "parents": [APP_DATA_FOLDER]}
        return self._service.files().create(body=meta, media_body=media, fields="id")

    def storage_quota_request(self) -> HttpRequest:
        return self._service.about().get(fields=QUOTA_FIELDS)
