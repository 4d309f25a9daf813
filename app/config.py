"""Sealed Users — Configuration via pydantic-settings."""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./dev.db"
    DB_ECHO: bool = False

    # Field encryption (keys look like "k1.aesgcm256.<base64>")
    FIELD_ENCRYPTION_KEY: str = ""
    FIELD_DECRYPTION_KEYS: str = ""  # comma-separated, for rotation

    # Logging
    LOG_LEVEL: str = "INFO"

    # Environment
    ENVIRONMENT: str = "development"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def decryption_keys(self) -> list[str]:
        return [k.strip() for k in self.FIELD_DECRYPTION_KEYS.split(",") if k.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
