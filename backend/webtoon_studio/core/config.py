"""Configuration management using pydantic-settings."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Gemini settings (empty key = provider disabled, placeholders only)
    google_generative_ai_api_key: str = ""
    image_model: str = "gemini-3-pro-image-preview"
    image_aspect_ratio: str = "1:1"
    image_size: str = "2K"
    provider_timeout_seconds: float = 300.0
    placeholder_delay_seconds: float = 1.0

    # Firestore settings
    gcp_project_id: str = ""
    scenarios_collection: str = "scenarios"
    generations_collection: str = "generations"
    characters_collection: str = "characters"

    # Artifact storage
    uploads_dir: str = "data/uploads"
    uploads_url_prefix: str = "/uploads"

    # Application settings
    app_name: str = "webtoon-studio"
    history_limit: int = 10

    # Server settings
    backend_host: str = "localhost"
    backend_port: int = 8000
    frontend_port: int = 3000


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
