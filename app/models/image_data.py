from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10 MB
IMAGE_MIME_PREFIX = "image/"


class ImageMetadata(BaseModel):
    filename: str
    size: int = Field(..., ge=0)
    type: str


class UploadedImage(BaseModel):
    """An accepted upload, held in memory for the duration of one request."""

    data: bytes = Field(..., repr=False)
    filename: str
    size_bytes: int = Field(..., ge=0, le=MAX_UPLOAD_BYTES)
    content_type: str

    @field_validator("content_type")
    @classmethod
    def _must_be_image(cls, value: str) -> str:
        if not value.startswith(IMAGE_MIME_PREFIX):
            raise ValueError(f"expected {IMAGE_MIME_PREFIX}*, got {value}")
        return value

    def metadata(self) -> ImageMetadata:
        return ImageMetadata(filename=self.filename, size=self.size_bytes, type=self.content_type)
