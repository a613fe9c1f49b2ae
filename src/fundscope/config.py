"""Application settings loaded from the environment / .env."""
from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    DATA_DIR: Path = Path("data")
    DATABASE_URL: str | None = None

    OLLAMA_URL: str = "http://localhost:11434"
    EMBEDDING_MODEL: str = "nomic-embed-text"
    EMBEDDING_DIM: int = Field(default=768, ge=1)
    EMBEDDING_MAX_CHARS: int = Field(default=4000, ge=1)
    HTTP_TIMEOUT_SECONDS: float = Field(default=30.0, gt=0)

    # "auto" probes sqlite-vec once at engine construction.
    VECTOR_BACKEND: Literal["auto", "sqlite-vec", "memory"] = "auto"
    TEXT_SEARCH_FIELDS: tuple[str, ...] = ("name", "strategy", "geography", "status")

    LOG_LEVEL: str = "INFO"

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"sqlite:///{self.DATA_DIR / 'fundscope.db'}"


settings = Settings()
