"""One-shot uploader - pushes a local file to Google Photos and creates a library item for it."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gphotos_repro.clients.gphotos import (
    NewMediaItem,
    PhotosApiError,
    UploadMediaItemRequest,
)
from gphotos_repro.scheduler import TaskResult

if TYPE_CHECKING:
    from gphotos_repro.config import AppContext

logger = logging.getLogger(__name__)

UPLOAD_TASK = "upload"


def upload_media_item(context: AppContext) -> TaskResult:
    """Upload ``settings.media_path`` in two steps: raw bytes, then batchCreate.

    The file stays open read-only until the item is created. Nothing is
    retried; any error ends up in the returned result.
    """
    path = context.settings.media_path
    photos, wire = context.photos, context.wire
    try:
        with open(path, "rb") as fh:
            # 1. Upload bytes
            upload_request = UploadMediaItemRequest(file_name=path.name, data=fh.read())
            wire.outbound(upload_request)
            upload_response = photos.upload_media_item(upload_request)
            wire.inbound(upload_response)
            if not upload_response.upload_token:
                raise PhotosApiError("Upload response carried no upload token")

            # 2. Create media item
            new_items = [NewMediaItem(upload_token=upload_response.upload_token, file_name=path.name)]
            wire.outbound(new_items)
            response = photos.batch_create_media_items(new_items)
            wire.inbound(response)

        failed = response.failed_results()
        if failed:
            raise PhotosApiError(f"Failed to create media item: {failed}")
    except Exception as exc:
        return TaskResult.failure(UPLOAD_TASK, exc)

    logger.info("Uploaded %s to Google Photos", path.name)
    return TaskResult.success(UPLOAD_TASK)
