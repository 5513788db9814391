"""Tests for staging multipart uploads on disk."""

from io import BytesIO

import pytest
from fastapi import UploadFile

from services import UploadTooLargeError, discard_staged, stage_upload


@pytest.mark.asyncio
async def test_stage_upload_writes_file_with_extension(tmp_path):
    upload = UploadFile(file=BytesIO(b"frame-data"), filename="Holiday.MOV")

    path = await stage_upload(upload, tmp_path / "temp", max_bytes=1024)

    assert path.parent == tmp_path / "temp"
    assert path.suffix == ".mov"
    assert path.read_bytes() == b"frame-data"


@pytest.mark.asyncio
async def test_stage_upload_rejects_oversized_file_and_cleans_up(tmp_path):
    upload = UploadFile(file=BytesIO(b"x" * 2048), filename="big.mp4")

    with pytest.raises(UploadTooLargeError):
        await stage_upload(upload, tmp_path, max_bytes=1024)

    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
async def test_stage_upload_rejects_empty_file(tmp_path):
    upload = UploadFile(file=BytesIO(b""), filename="empty.png")

    with pytest.raises(ValueError):
        await stage_upload(upload, tmp_path, max_bytes=1024)

    assert list(tmp_path.iterdir()) == []


def test_discard_staged_tolerates_missing_paths(tmp_path):
    kept = tmp_path / "a.png"
    kept.write_bytes(b"1")

    discard_staged(kept, None, tmp_path / "gone.png")

    assert not kept.exists()
