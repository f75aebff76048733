"""HTTP response bodies."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from .image_data import ImageMetadata


class HealthResponse(BaseModel):
    status: str = "OK"
    message: str = "Server is running"


class AnalyzeResponse(BaseModel):
    success: bool = True
    analysis: str
    metadata: ImageMetadata


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None  # only populated outside production
