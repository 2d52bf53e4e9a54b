"""Configuration loaded from environment / .env file."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_REGISTRY = "https://registry.npmjs.org"


class Settings(BaseSettings):
    registry: str = DEFAULT_REGISTRY
    locale: str = "en"
    dist_tag: str = "latest"
    timeout: float = 30.0
    max_concurrency: int = 6
    debug: bool = False

    model_config = SettingsConfigDict(
        env_prefix="MODERN_UPGRADE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
