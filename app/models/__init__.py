from .analysis import AnalysisRequest, AnalysisResult
from .image_data import IMAGE_MIME_PREFIX, MAX_UPLOAD_BYTES, ImageMetadata, UploadedImage
from .responses import AnalyzeResponse, ErrorResponse, HealthResponse

__all__ = [
    "AnalysisRequest",
    "AnalysisResult",
    "AnalyzeResponse",
    "ErrorResponse",
    "HealthResponse",
    "IMAGE_MIME_PREFIX",
    "ImageMetadata",
    "MAX_UPLOAD_BYTES",
    "UploadedImage",
]
