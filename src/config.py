"""Planner settings read from the environment, with .env as fallback."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings.

    ``DATA_DIR`` points at the JSON catalogs; ``CACHE_MAX_ENTRIES`` bounds each
    service's memo cache.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    DATABASE_URL: str = "sqlite:///./dev.db"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Game data
    DATA_DIR: str = str(Path(__file__).resolve().parent / "data")
    DEFAULT_ENDURANCE: int = 20

    # Memoization
    CACHE_MAX_ENTRIES: int = 100


settings = Settings()
