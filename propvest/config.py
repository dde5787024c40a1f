"""
Application configuration using Pydantic Settings.
"""

import os
from functools import lru_cache
from pydantic_settings import BaseSettings


def get_env_file() -> str:
    """Determine which env file to use based on environment."""
    env = os.getenv("APP_ENV", "development")
    if env == "production":
        return ".env.production"
    return ".env.development"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App settings
    app_name: str = "PropVest AI"
    debug: bool = False
    log_level: str = "INFO"
    app_env: str = "development"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Gemini
    gemini_api_key: str = ""
    image_edit_model: str = "gemini-2.5-flash-image"
    video_model: str = "veo-3.1-fast-generate-preview"
    research_model: str = "gemini-2.5-flash"
    voice_model: str = "gemini-2.5-flash-native-audio-preview-09-2025"
    voice_name: str = "Aoede"

    # Video generation polling
    veo_poll_interval_seconds: float = 5.0
    veo_timeout_seconds: float = 600.0

    class Config:
        env_file = get_env_file()
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
