"""Staging of multipart uploads on local disk before they go to the media host."""

from __future__ import annotations

from pathlib import Path
from uuid import uuid4

from fastapi import UploadFile

CHUNK_SIZE = 1024 * 1024


class UploadTooLargeError(ValueError):
    """Raised when an uploaded file exceeds the configured size cap."""


async def stage_upload(upload: UploadFile, directory: str | Path, max_bytes: int) -> Path:
    """Stream ``upload`` into ``directory`` and return the temp file path."""
    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)
    suffix = Path(upload.filename or "").suffix.lower()
    target = target_dir / f"{uuid4().hex}{suffix}"

    written = 0
    try:
        with target.open("wb") as handle:
            while chunk := await upload.read(CHUNK_SIZE):
                written += len(chunk)
                if written > max_bytes:
                    raise UploadTooLargeError(
                        f"File exceeds the {max_bytes} byte upload limit"
                    )
                handle.write(chunk)
    except BaseException:
        target.unlink(missing_ok=True)
        raise
    finally:
        await upload.close()

    if written == 0:
        target.unlink(missing_ok=True)
        raise ValueError("Uploaded file is empty")
    return target


def discard_staged(*paths: Path | None) -> None:
    for path in paths:
        if path is not None:
            path.unlink(missing_ok=True)
