from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PROJECTION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(default="INFO")
    api_title: str = Field(default="Financial Projection Engine")
    api_version: str = Field(default="0.1.0")
    max_projection_years: int = Field(default=10, ge=1, description="Upper bound on anio_fin - anio_inicio + 1 per request")


@lru_cache
def get_settings() -> Settings:
    return Settings()
