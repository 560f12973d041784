from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Both secrets are required; a missing one fails at startup.
    stripe_account_secret: str
    stripe_webhook_secret: str
    webhook_tolerance: int = 300  # seconds
    host: str = "localhost"
    port: int = 4242
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[arg-type]
