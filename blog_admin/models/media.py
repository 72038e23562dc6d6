"""Media upload models."""

from pydantic import BaseModel, Field


class UploadResult(BaseModel):
    """A stored upload, addressed by the hash of its bytes."""

    filename: str
    url: str
    size: int
    content_type: str = Field(alias="type")

    model_config = {"populate_by_name": True}


class UploadResponse(UploadResult):
    success: bool = True
    message: str = "File uploaded successfully!"
