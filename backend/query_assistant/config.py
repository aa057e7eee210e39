"""Configuration helpers for the query assistant."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    openai_api_key: str = Field(..., validation_alias="OPENAI_API_KEY")
    openai_model: str = Field("gpt-3.5-turbo", validation_alias="OPENAI_MODEL")
    temperature: float = Field(0.7, ge=0.0, le=2.0, validation_alias="OPENAI_TEMPERATURE")
    suggestions_count: int = Field(
        5,
        ge=1,
        le=10,
        validation_alias="SUGGESTIONS_COUNT",
    )
    min_query_length: int = Field(3, ge=1, validation_alias="MIN_QUERY_LENGTH")
    debounce_seconds: float = Field(1.0, ge=0.0, validation_alias="DEBOUNCE_SECONDS")
    session_ttl_seconds: float = Field(1800.0, gt=0.0, validation_alias="SESSION_TTL_SECONDS")
    max_sessions: int = Field(1000, ge=1, validation_alias="MAX_SESSIONS")
    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")
    host: str = Field("127.0.0.1", validation_alias="HOST")
    port: int = Field(8000, validation_alias="PORT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached app settings."""
    return Settings()
