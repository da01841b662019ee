"""Application configuration via environment variables."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """App settings loaded from .env or environment."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "sqlite:///./eventsync.db"
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_BASE_URL: str = ""
    OPENAI_TIMEOUT_SECONDS: float = 30.0
    CORS_ORIGINS: str = "http://localhost:5173"
    ASSISTANT_TIMEZONE: str = "UTC"  # IANA tz used to resolve "today"
    LOG_LEVEL: str = "INFO"


settings = Settings()
