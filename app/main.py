from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import Scope

from app.config import get_settings
from app.errors import AnalyzerError
from app.handlers import analyze_handler
from app.models import ErrorResponse, HealthResponse

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def _is_api_path(path: str) -> bool:
    return path == "api" or path.startswith("api/")


class SinglePageApp(StaticFiles):
    """Static bundle that serves ``index.html`` for unknown client-side routes."""

    async def get_response(self, path: str, scope: Scope):
        if _is_api_path(path):
            raise StarletteHTTPException(status_code=status.HTTP_404_NOT_FOUND)
        try:
            return await super().get_response(path, scope)
        except StarletteHTTPException as exc:
            if exc.status_code != status.HTTP_404_NOT_FOUND:
                raise
            return await super().get_response("index.html", scope)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY environment variable is not set!")
        logger.warning("Create a .env file with your OpenAI API key to enable image analysis.")
    logger.info("Server running on port %d (environment=%s)", settings.port, settings.environment)
    yield


app = FastAPI(title="Image Analyzer API", lifespan=lifespan)

app.include_router(analyze_handler.router)


@app.get("/api/health", response_model=HealthResponse)
async def health():
    return HealthResponse()


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------


@app.exception_handler(AnalyzerError)
async def analyzer_error_handler(request: Request, exc: AnalyzerError) -> JSONResponse:
    body = ErrorResponse(error=exc.message, details=exc.details)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=str(exc.detail)).model_dump(exclude_none=True),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error: %s", exc, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error="Internal server error").model_dump(exclude_none=True),
    )


# ---------------------------------------------------------------------------
# Static frontend (mounted last so API routes take precedence)
# ---------------------------------------------------------------------------

_static_dir = Path(settings.static_dir)
if _static_dir.is_dir():
    app.mount("/", SinglePageApp(directory=_static_dir, html=True), name="static")
else:
    logger.warning("Static directory %s not found; frontend will not be served", _static_dir)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
