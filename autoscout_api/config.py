"""
API configuration and settings management.
"""
import os

from autoscout.config import get_int_env


class Config:
    """Application configuration."""

    # API settings
    API_TITLE: str = "AutoScout24 Crawl API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Start and stop AutoScout24 listing crawls, streaming progress as server-sent events"

    # CORS settings
    CORS_ORIGINS: list = ["*"]
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: list = ["*"]
    CORS_ALLOW_HEADERS: list = ["*"]

    # Crawl limits
    MAX_CONCURRENT_JOBS: int = get_int_env("AUTOSCOUT_MAX_CONCURRENT_JOBS", 2)

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> None:
        """Validate configuration on startup."""
        if cls.MAX_CONCURRENT_JOBS < 1:
            raise ValueError(f"AUTOSCOUT_MAX_CONCURRENT_JOBS must be >= 1, got {cls.MAX_CONCURRENT_JOBS}")
        if cls.LOG_LEVEL.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid LOG_LEVEL: {cls.LOG_LEVEL}")

# Global config instance
config = Config()
