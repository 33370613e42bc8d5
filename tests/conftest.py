import io
import json
import logging
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from gphotos_repro.clients.gphotos import (
    BatchCreateMediaItemsResponse,
    UploadMediaItemResponse,
)
from gphotos_repro.wire import setup_wire_logger


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(autouse=True)
def _restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


@pytest.fixture
def client_secrets(tmp_path: Path) -> Path:
    path = tmp_path / "client_secret.json"
    path.write_text(json.dumps({
        "installed": {
            "client_id": "cid.apps.googleusercontent.com",
            "client_secret": "s3cret",
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": "https://oauth2.googleapis.com/token",
            "redirect_uris": ["http://localhost"],
        }
    }))
    return path


@pytest.fixture
def media_file(tmp_path: Path) -> Path:
    path = tmp_path / "photo.jpg"
    path.write_bytes(b"\xff\xd8\xff\xe0fake-jpeg")
    return path


@pytest.fixture
def wire_stream():
    return io.StringIO()


@pytest.fixture
def context(media_file, wire_stream):
    drive = MagicMock()
    drive.create_marker_file_request.return_value.execute.return_value = {"id": "marker-1"}
    drive.storage_quota_request.return_value.execute.return_value = {
        "storageQuota": {"limit": "16106127360", "usage": "1024"}
    }
    photos = MagicMock()
    photos.upload_media_item.return_value = UploadMediaItemResponse(200, "upload-token-1")
    photos.batch_create_media_items.return_value = BatchCreateMediaItemsResponse(
        200, [{"uploadToken": "upload-token-1", "status": {"message": "Success"}}]
    )
    return SimpleNamespace(
        settings=SimpleNamespace(media_path=media_file, probe_interval=60.0),
        drive=drive,
        photos=photos,
        wire=setup_wire_logger(wire_stream),
    )
