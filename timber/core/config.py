"""SDK configuration using Pydantic Settings."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """SDK settings loaded from ``TIMBER_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TIMBER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API
    api_key: str = ""
    base_url: str = "http://localhost:4010"
    api_prefix: str = "/api/v1/user/sdk"

    # Transport
    timeout: float = 30.0  # seconds
    max_retries: int = 3
    initial_retry_delay: float = 1.0  # seconds
    max_retry_delay: float = 30.0  # seconds

    # Redis - empty means caching is disabled
    redis_url: Optional[str] = None
    cache_ttl: int = 300  # 5 minutes

    debug: bool = False


# Create settings instance
settings = Settings()
