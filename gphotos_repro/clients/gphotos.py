"""Google Photos client - uploads raw media bytes and creates library items from upload tokens."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import requests
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

logger = logging.getLogger(__name__)

# Google Photos API endpoints
PHOTOS_UPLOAD_URL = "https://photoslibrary.googleapis.com/v1/uploads"
PHOTOS_BATCH_CREATE_URL = "https://photoslibrary.googleapis.com/v1/mediaItems:batchCreate"

DEFAULT_MIME_TYPE = "application/octet-stream"


class PhotosApiError(RuntimeError):
    """Raised when the Photos Library API rejects an upload or item creation."""


@dataclass
class UploadMediaItemRequest:
    file_name: str
    data: bytes = field(repr=False)
    mime_type: str = DEFAULT_MIME_TYPE

    def __str__(self) -> str:
        return (
            f"UploadMediaItemRequest(file_name={self.file_name!r}, "
            f"mime_type={self.mime_type!r}, size={len(self.data)})"
        )


@dataclass
class UploadMediaItemResponse:
    status_code: int
    upload_token: Optional[str] = None


@dataclass
class NewMediaItem:
    upload_token: str
    file_name: str

    def to_json(self) -> dict:
        return {
            "simpleMediaItem": {
                "uploadToken": self.upload_token,
                "fileName": self.file_name,
            }
        }


@dataclass
class BatchCreateMediaItemsResponse:
    status_code: int
    results: List[dict] = field(default_factory=list)

    def failed_results(self) -> List[dict]:
        """Item results whose status carries a non-zero code (an omitted code means OK)."""
        return [r for r in self.results if r.get("status", {}).get("code", 0) != 0]


class GooglePhotosClient:
    """Wraps the Google Photos Library REST endpoints used for a two-step upload."""

    def __init__(self, credentials: Credentials, session: requests.Session | None = None):
        self._creds = credentials
        self._session = session or requests.Session()

    def _get_token(self) -> str:
        if not self._creds.valid:
            self._creds.refresh(Request())
        return self._creds.token

    # ── upload ──────────────────────────────────────────────────────

    def upload_media_item(self, request: UploadMediaItemRequest) -> UploadMediaItemResponse:
        """Upload raw bytes. The response body is the opaque upload token."""
        resp = self._session.post(
            PHOTOS_UPLOAD_URL,
            headers={
                "Authorization": f"Bearer {self._get_token()}",
                "Content-type": "application/octet-stream",
                "X-Goog-Upload-Content-Type": request.mime_type,
                "X-Goog-Upload-File-Name": request.file_name,
                "X-Goog-Upload-Protocol": "raw",
            },
            data=request.data,
        )
        if resp.status_code != 200:
            raise PhotosApiError(f"Failed to upload bytes ({resp.status_code}): {resp.text}")
        logger.debug("Uploaded %d bytes of %s", len(request.data), request.file_name)
        return UploadMediaItemResponse(status_code=resp.status_code, upload_token=resp.text or None)

    # ── media items ─────────────────────────────────────────────────

    def batch_create_media_items(self, items: List[NewMediaItem]) -> BatchCreateMediaItemsResponse:
        """Create library items from previously uploaded tokens."""
        resp = self._session.post(
            PHOTOS_BATCH_CREATE_URL,
            headers={
                "Authorization": f"Bearer {self._get_token()}",
                "Content-type": "application/json",
            },
            json={"newMediaItems": [item.to_json() for item in items]},
        )
        if resp.status_code != 200:
            raise PhotosApiError(f"Failed to create media item ({resp.status_code}): {resp.text}")
        return BatchCreateMediaItemsResponse(
            status_code=resp.status_code,
            results=resp.json().get("newMediaItemResults", []),
        )
