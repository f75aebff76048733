"""Image analysis endpoint."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from app.dependencies import get_analysis_relay, get_upload_gateway
from app.models import AnalyzeResponse, ErrorResponse
from app.services.analysis import AnalysisRelay
from app.services.upload import UploadGateway

router = APIRouter(prefix="/api")


@router.post(
    "/analyze",
    response_model=AnalyzeResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def analyze_image(
    request: Request,
    gateway: UploadGateway = Depends(get_upload_gateway),
    relay: AnalysisRelay = Depends(get_analysis_relay),
) -> AnalyzeResponse:
    """Accept a multipart upload (field ``image``) and return the model's analysis.

    The upload is validated before the credential is checked, so a bad
    upload is reported as such even on an unconfigured server.
    """
    image = await gateway.receive(request)
    result = await relay.analyze(image)
    return AnalyzeResponse(analysis=result.text, metadata=result.metadata)
