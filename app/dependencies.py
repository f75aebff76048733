"""FastAPI dependencies.

Settings, the LLM provider and the services built on them are resolved per
request through ``Depends`` so tests can swap any of them with
``app.dependency_overrides``.
"""
from __future__ import annotations

from fastapi import Depends

from app.config import Settings, get_settings
from app.services.analysis import AnalysisRelay
from app.services.llm import LLMProvider, get_provider
from app.services.upload import UploadGateway

_upload_gateway = UploadGateway()


def get_upload_gateway() -> UploadGateway:
    return _upload_gateway


def get_analysis_relay(
    settings: Settings = Depends(get_settings),
    provider: LLMProvider = Depends(get_provider),
) -> AnalysisRelay:
    return AnalysisRelay(provider, settings)
