"""
Application configuration from environment variables
"""
from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Persistence API (external)
    BACKEND_API_URL: str = "http://localhost:8000"
    BACKEND_API_TOKEN: Optional[str] = None
    BACKEND_TIMEOUT_SECONDS: float = 30.0

    # Batch metadata
    BHSS_KITCHEN_NAME: str = "BHSS Kitchen"

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    # Limits
    MAX_FILE_SIZE_MB: int = 20

    # Import sessions (in memory)
    SESSION_TTL_MINUTES: float = 60
    MAX_SESSIONS: int = 100

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @field_validator("BACKEND_API_URL")
    @classmethod
    def strip_trailing_slashes(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def max_file_size_bytes(self) -> int:
        return self.MAX_FILE_SIZE_MB * 1024 * 1024


# Global settings instance
settings = Settings()
