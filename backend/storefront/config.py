from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./storefront.db"
    APP_HOST: str = "127.0.0.1"
    APP_PORT: int = 8000
    SECRET_KEY: str = "change-this-secret"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_TTL_SECONDS: int = 3600
    FRONTEND_ORIGINS: List[str] = ["http://localhost:3000"]
    LOG_LEVEL: str = "INFO"

    UPLOAD_DIR: str = "uploads"
    UPLOAD_URL_PREFIX: str = "/uploads"
    MAX_UPLOAD_BYTES: int = 1024 * 1024
    ALLOWED_IMAGE_EXTENSIONS: List[str] = ["jpeg", "jpg", "png", "gif", "webp"]
    ORPHAN_SWEEP_INTERVAL_SECONDS: int = 3600
    ORPHAN_GRACE_SECONDS: int = 600

    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100
    ALLOW_ADMIN_SIGNUP: bool = True

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Default settings for the process entrypoint; the app factory accepts its own."""
    return Settings()
