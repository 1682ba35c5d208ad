"""Configuration settings for the application."""

from pydantic_settings import (
    BaseSettings,
    SettingsConfigDict,
)


class Settings(BaseSettings):
    """Pydantic settings class for the application."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # These will be loaded from environment variables or a .env file if not provided
    API_PORT: int = 8000
    DEBUG: bool = True
    LOG_LEVEL: str = "info"  # Options: debug, info, warning, error, critical

    # Copy generation (getPersuasiveCopy)
    OPENAI_API_KEY: str | None = None
    COPY_MODEL: str = "gpt-4o-mini"
    COPY_TEMPERATURE: float = 0.8


settings = Settings()
