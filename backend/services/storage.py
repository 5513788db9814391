"""MinIO-backed media upload gateway."""

from __future__ import annotations

import logging
import mimetypes
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from uuid import uuid4

from minio import Minio
from minio.error import MinioException, S3Error
from urllib3.exceptions import HTTPError as TransportError

from core import ConfigurationError, Settings, settings

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class MediaUploadError(Exception):
    """Raised when the media host rejects or cannot receive an upload."""


class MissingUploadSourceError(MediaUploadError):
    """Raised when there is no local file to upload."""


@dataclass(frozen=True)
class UploadedMedia:
    url: str
    object_key: str
    bucket: str
    content_type: str
    resource_type: str
    size: int
    etag: str | None = None
    version_id: str | None = None


def detect_resource_type(content_type: str) -> str:
    """Map a MIME type onto the coarse kind used for object keys."""
    major = content_type.split("/", 1)[0]
    if major in {"image", "video"}:
        return major
    if major == "audio":
        return "video"
    return "raw"


def _remove_local_file(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning(
            "Failed to remove local upload source",
            extra={"path": str(path)},
            exc_info=exc,
        )


class MediaUploadGateway:
    """Moves local files to the object store and reports their public URL."""

    def __init__(self, client: Minio, *, bucket: str, public_base_url: str) -> None:
        self.client = client
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/")

    @classmethod
    def from_settings(cls, config: Settings) -> MediaUploadGateway:
        if not config.minio_access_key or not config.minio_secret_key:
            raise ConfigurationError("MINIO_ACCESS_KEY and MINIO_SECRET_KEY must be set")
        client = Minio(
            config.minio_endpoint,
            access_key=config.minio_access_key,
            secret_key=config.minio_secret_key,
            secure=config.minio_secure,
        )
        return cls(client, bucket=config.minio_bucket, public_base_url=config.media_base_url)

    def url_for(self, object_key: str) -> str:
        return f"{self.public_base_url}/{self.bucket}/{object_key}"

    def ensure_bucket(self) -> None:
        """Ensure the configured bucket exists."""
        if self.client.bucket_exists(self.bucket):
            return

        try:
            self.client.make_bucket(self.bucket)
        except S3Error as exc:
            allowed_codes = {"BucketAlreadyOwnedByYou", "BucketAlreadyExists"}
            if exc.code not in allowed_codes:
                raise

    def upload(self, local_path: str | os.PathLike[str] | None, *, folder: str = "uploads") -> UploadedMedia:
        """Upload ``local_path`` and return its stable URL.

        The local file is removed once the call finishes, whether or not the
        transfer succeeded. Nothing is sent when the path is empty or does
        not name an existing file. No retry is attempted.
        """
        if local_path is None or not str(local_path).strip():
            raise MissingUploadSourceError("No local file path given")
        source = Path(local_path)
        if not source.is_file():
            raise MissingUploadSourceError(f"Local file not found: {source}")

        content_type = mimetypes.guess_type(source.name)[0] or DEFAULT_CONTENT_TYPE
        resource_type = detect_resource_type(content_type)
        object_key = f"{folder.strip('/')}/{resource_type}/{uuid4().hex}{source.suffix.lower()}"

        try:
            size = source.stat().st_size
            self.ensure_bucket()
            result = self.client.fput_object(
                self.bucket,
                object_key,
                str(source),
                content_type=content_type,
            )
        except (MinioException, TransportError, OSError) as exc:
            logger.warning(
                "Media upload failed",
                extra={"path": str(source), "object_key": object_key},
                exc_info=exc,
            )
            raise MediaUploadError(f"Upload of {source.name} failed") from exc
        finally:
            _remove_local_file(source)

        media = UploadedMedia(
            url=self.url_for(object_key),
            object_key=object_key,
            bucket=self.bucket,
            content_type=content_type,
            resource_type=resource_type,
            size=size,
            etag=getattr(result, "etag", None),
            version_id=getattr(result, "version_id", None),
        )
        logger.info("Media uploaded", extra={"object_key": object_key, "url": media.url})
        return media

    def delete(self, object_key: str) -> None:
        """Delete an uploaded object when it exists."""
        try:
            self.client.remove_object(self.bucket, object_key)
        except S3Error as exc:
            allowed_codes = {"NoSuchKey", "NoSuchObject", "ResourceNotFound"}
            if exc.code not in allowed_codes:
                raise

    def delete_quietly(self, *object_keys: str) -> None:
        for object_key in object_keys:
            try:
                self.delete(object_key)
            except Exception as cleanup_error:
                logger.warning(
                    "Failed to cleanup uploaded media",
                    extra={"object_key": object_key},
                    exc_info=cleanup_error,
                )


@lru_cache
def get_media_gateway() -> MediaUploadGateway:
    """Return the process-wide gateway configured from settings."""
    return MediaUploadGateway.from_settings(settings)
