"""Centralised application settings loaded from environment / .env file."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Per-order locking: "local" (single process) or "redis"
    lock_backend: str = "local"
    lock_ttl_seconds: int = 10
    redis_url: str = "redis://localhost:6379/0"

    # API
    rate_limit: str = "100/minute"
    rate_limit_enabled: bool = True

    # Orders without progress for this long are reported as stale
    stale_order_minutes: int = 30

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
