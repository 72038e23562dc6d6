"""Content-addressed image uploads written to the public uploads directory."""

import hashlib
import logging
from pathlib import PurePath

from blog_admin.config import get_settings
from blog_admin.errors import StorageError, UnsupportedTypeError
from blog_admin.models.media import UploadResult

logger = logging.getLogger(__name__)

# MIME type -> extension used when the client's file name has no usable one
ALLOWED_TYPES = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}
# file name extension -> extension written, so one image always gets one name
IMAGE_EXTENSIONS = {"jpg": "jpg", "jpeg": "jpg", "png": "png", "gif": "gif", "webp": "webp"}


def _extension(filename: str | None, content_type: str) -> str:
    suffix = PurePath(filename or "").suffix.lstrip(".").lower()
    if suffix in IMAGE_EXTENSIONS:
        return IMAGE_EXTENSIONS[suffix]
    return ALLOWED_TYPES.get(content_type, "jpg")


def check_upload(content_type: str, size: int) -> None:
    """Raise UnsupportedTypeError unless the upload passes type and size limits."""
    if content_type not in ALLOWED_TYPES:
        raise UnsupportedTypeError(
            "Invalid file type. Only JPEG, PNG, GIF, and WebP are allowed."
        )
    max_bytes = get_settings().max_upload_bytes
    if size > max_bytes:
        raise UnsupportedTypeError(
            f"File size too large. Maximum size is {max_bytes // (1024 * 1024)}MB."
        )


async def store_upload(
    data: bytes, content_type: str, filename: str | None = None
) -> UploadResult:
    """Validate and write an uploaded image as ``<md5>.<ext>``.

    Identical bytes always map to the same file name, so a repeated upload
    overwrites the earlier copy with the same content.
    """
    check_upload(content_type, len(data))

    settings = get_settings()
    digest = hashlib.md5(data, usedforsecurity=False).hexdigest()
    name = f"{digest}.{_extension(filename, content_type)}"
    upload_dir = settings.uploads_path
    try:
        upload_dir.mkdir(parents=True, exist_ok=True)
        (upload_dir / name).write_bytes(data)
    except OSError as e:
        logger.error("Could not write upload %s: %s", name, e)
        raise StorageError(f"Failed to upload file: {e}") from e

    logger.info("Stored upload %s (%d bytes)", name, len(data))
    return UploadResult(
        filename=name,
        url=f"{settings.uploads_url_prefix.rstrip('/')}/{name}",
        size=len(data),
        content_type=content_type,
    )
