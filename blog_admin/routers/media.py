"""Media upload endpoint."""

from fastapi import APIRouter, File, UploadFile

from blog_admin.errors import ValidationError
from blog_admin.models.media import UploadResponse
from blog_admin.services.media_storage import check_upload, store_upload

router = APIRouter(prefix="/media", tags=["media"])


@router.post("/upload", response_model=UploadResponse)
async def upload_media(file: UploadFile | None = File(default=None)):
    """Store an image under its content hash and return its public URL."""
    if file is None:
        raise ValidationError("No file provided")
    content_type = file.content_type or ""
    # Reject before buffering when the client declared an oversized body
    check_upload(content_type, file.size or 0)
    data = await file.read()
    result = await store_upload(data, content_type, file.filename)
    return UploadResponse(**result.model_dump())
