"""gphotos_repro clients - thin wrappers over the Google Drive and Google Photos APIs."""

from .gdrive import GDriveClient
from .gphotos import GooglePhotosClient, PhotosApiError

__all__ = ["GDriveClient", "GooglePhotosClient", "PhotosApiError"]
