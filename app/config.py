from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from a .env file if present (local dev only)
load_dotenv()

_DEFAULT_STATIC_DIR = Path(__file__).resolve().parent.parent / "public"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables or .env file."""

    # Server
    host: str = Field("0.0.0.0", description="Interface uvicorn binds to.")
    port: int = Field(3000, ge=1, le=65535)
    environment: str = Field(
        "production",
        description="Runtime mode. Error details are only returned outside production.",
    )
    log_level: str = Field("INFO")

    # OpenAI. Optional so the server can start (and serve static assets) without it.
    openai_api_key: Optional[str] = Field(default=None)

    # LLM provider selection
    llm_provider: str = Field("openai")

    # Static single-page bundle
    static_dir: str = Field(str(_DEFAULT_STATIC_DIR))

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"


@lru_cache()
def get_settings() -> Settings:  # pragma: no cover
    """Return a cached Settings instance so it is only parsed once."""

    return Settings()
