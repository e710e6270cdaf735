"""
Application configuration and environment settings.
"""
from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import List, Union


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "PickMate"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./pickmate.db"
    DB_ECHO: bool = False

    # JWT
    SECRET_KEY: str = "your-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7

    # CORS
    CORS_ORIGINS: Union[List[str], str] = ["http://localhost:3000", "http://localhost:5173"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS_ORIGINS from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # Couples
    INVITE_CODE_LENGTH: int = 6
    INVITE_CODE_MAX_ATTEMPTS: int = 10  # Regenerate on collision before giving up

    # Decisions
    MAX_OPTIONS_PER_DECISION: int = 5

    # Anonymous voting link
    VOTER_COOKIE_NAME: str = "pickmate_voter_id"
    VOTER_COOKIE_MAX_AGE: int = 60 * 60 * 24 * 365  # 1 year

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
