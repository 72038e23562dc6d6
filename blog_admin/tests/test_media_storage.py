"""Tests for content-addressed media uploads."""

import hashlib

import pytest

from blog_admin.errors import StorageError, UnsupportedTypeError
from blog_admin.services.media_storage import store_upload

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


async def test_upload_named_by_content_hash(uploads_dir):
    result = await store_upload(PNG_BYTES, "image/png", "Screenshot.PNG")

    digest = hashlib.md5(PNG_BYTES).hexdigest()
    assert result.filename == f"{digest}.png"
    assert result.url == f"/images/uploads/{digest}.png"
    assert result.size == len(PNG_BYTES)
    assert result.content_type == "image/png"
    assert (uploads_dir / result.filename).read_bytes() == PNG_BYTES


async def test_same_bytes_same_url(uploads_dir):
    first = await store_upload(PNG_BYTES, "image/png", "a.png")
    second = await store_upload(PNG_BYTES, "image/png", "b.png")

    assert first.url == second.url
    assert len(list(uploads_dir.iterdir())) == 1


async def test_different_bytes_different_url(uploads_dir):
    first = await store_upload(b"one", "image/gif", "a.gif")
    second = await store_upload(b"two", "image/gif", "a.gif")
    assert first.url != second.url


@pytest.mark.parametrize(
    ("filename", "content_type", "ext"),
    [
        ("photo.JPEG", "image/jpeg", "jpg"),
        ("no-extension", "image/webp", "webp"),
        (None, "image/jpg", "jpg"),
        ("evil.php", "image/png", "png"),
    ],
)
async def test_extension_choice(uploads_dir, filename, content_type, ext):
    result = await store_upload(b"bytes", content_type, filename)
    assert result.filename.endswith(f".{ext}")


async def test_disallowed_type_writes_nothing(uploads_dir):
    with pytest.raises(UnsupportedTypeError, match="Invalid file type"):
        await store_upload(b"%PDF-1.7", "application/pdf", "doc.pdf")
    assert not uploads_dir.exists()


async def test_oversized_upload_rejected(uploads_dir, mock_settings):
    data = b"x" * (mock_settings.max_upload_bytes + 1)
    with pytest.raises(UnsupportedTypeError, match="too large"):
        await store_upload(data, "image/png", "big.png")
    assert not uploads_dir.exists()


async def test_write_failure_raises_storage_error(uploads_dir):
    uploads_dir.parent.mkdir(parents=True, exist_ok=True)
    uploads_dir.write_text("a file where the directory should be")
    with pytest.raises(StorageError):
        await store_upload(PNG_BYTES, "image/png", "a.png")


async def test_jpg_and_jpeg_names_share_one_file(uploads_dir):
    first = await store_upload(PNG_BYTES, "image/jpeg", "a.jpg")
    second = await store_upload(PNG_BYTES, "image/jpeg", "a.JPEG")

    assert first.url == second.url
    assert first.filename.endswith(".jpg")
    assert len(list(uploads_dir.iterdir())) == 1
