"""vismatch client configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """vismatch client settings.

    All fields can be overridden via environment variables with
    the VISMATCH_ prefix (e.g., VISMATCH_API_URL).
    """

    api_url: str = "http://localhost:3000"
    request_timeout: float = 30.0
    cleanup_delay: float = 2.0  # seconds succeeded uploads stay visible
    log_level: str = "INFO"

    model_config = {
        "env_prefix": "VISMATCH_",
        "env_file": ".env",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Return cached client settings (singleton)."""
    return Settings()
