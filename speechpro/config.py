"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "speechpro-records"
    app_env: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    secret_key: str = "change-me-in-production"

    # Database
    database_url: str = "sqlite+aiosqlite:///./speechpro.db"
    storage_timeout_seconds: float = 10.0

    # Field encryption
    encryption_key: Optional[str] = None  # Fernet key; derived from secret_key when unset
    encryption_salt: str = "speechpro-field-encryption"
    encryption_kdf_iterations: int = 390_000

    # Rate Limiting
    rate_limit_per_minute: int = 60
    rate_limit_per_hour: int = 500
    rate_limit_storage_uri: str = "memory://"

    # History
    history_page_max: int = 500

    # Logging
    log_level: str = "INFO"

    @property
    def action_labels(self) -> dict[str, str]:
        """Human-readable titles for activity log action types."""
        return {
            "upload": "Audio Upload",
            "transcribe": "Transcription",
            "translate": "Translation",
            "s2s": "Speech-to-Speech",
            "streaming": "Real-time Transcription",
            "tts": "Text-to-Speech",
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
