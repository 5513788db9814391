"""Business logic services."""

from .storage import (
    MediaUploadError,
    MediaUploadGateway,
    MissingUploadSourceError,
    UploadedMedia,
    get_media_gateway,
)
from .uploads import UploadTooLargeError, discard_staged, stage_upload

__all__ = [
    "MediaUploadError",
    "MediaUploadGateway",
    "MissingUploadSourceError",
    "UploadedMedia",
    "get_media_gateway",
    "UploadTooLargeError",
    "discard_staged",
    "stage_upload",
]
