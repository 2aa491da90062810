"""
Server Settings

Pydantic settings for the HTTP server, read from the environment (prefix
``PANELSMITH_``) and ``.env``. Generation behaviour lives in the JSON config.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    debug: bool = Field(default=False)
    log_level: str = Field(default="info")

    # CORS
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://127.0.0.1:3000"]
    )

    # Generation
    config_path: Optional[str] = Field(default=None)
    generation_rate_limit: str = Field(default="10/minute")

    class Config:
        env_prefix = "PANELSMITH_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
