from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Portal settings loaded from the environment / .env."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    PROJECT_NAME: str = "LLND Enrollment Portal"

    # External enrollment API (system of record)
    API_BASE_URL: str = Field(default="https://localhost:7419/api", description="Root URL of the enrollment API")
    API_TIMEOUT_SECONDS: float = 30.0

    # Tokens are issued by the enrollment API and verified here with the shared secret
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 90

    # Draft storage for in-progress quiz attempts and wizards
    DATABASE_URL: str = "sqlite:///./portal.db"

    CORS_ORIGINS: List[str] = ["http://localhost:5173"]
    LOG_LEVEL: str = "INFO"

    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024

    # Course and date dropdowns change rarely
    COURSE_CACHE_SECONDS: int = 300


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
