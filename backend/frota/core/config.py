"""Application configuration using pydantic-settings."""
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parents[3] / ".env"),
        case_sensitive=False,
    )

    # Application
    app_name: str = "Frota & Transfer API"
    log_level: str = "INFO"
    default_operator: str = "Admin Sistema"

    # Local key-value store holding the request collection
    state_path: str = "./data/local_storage.json"
    storage_key: str = "fleet_requests"

    # Text-generation service (OpenAI-compatible endpoint)
    api_key: str = ""
    llm_base_url: str | None = "https://generativelanguage.googleapis.com/v1beta/openai/"
    llm_model: str = "gemini-3-flash-preview"
    llm_temperature: float = 0.4
    llm_max_tokens: int = 800
    llm_timeout_seconds: float = 30.0

    def resolved_api_key(self) -> str | None:
        """Return the configured credential, or None when analysis is not configured."""
        key = (self.api_key or "").strip()
        if key and key != "your-api-key-here":
            return key
        return None

    def resolved_base_url(self) -> str | None:
        value = (self.llm_base_url or "").strip()
        return value or None


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
