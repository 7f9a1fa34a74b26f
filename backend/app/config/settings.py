"""
Configuration settings for the job-board listing service.
Loads environment variables and provides application settings.
"""
from pathlib import Path
from pydantic_settings import BaseSettings

# settings.py is at backend/app/config/settings.py → 4 levels up
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database - use absolute path to avoid working directory issues
    database_url: str = f"sqlite:///{_PROJECT_ROOT}/data/jobboard.db"
    sql_echo: bool = False  # Log every SQL statement (debugging only)

    # Server
    api_prefix: str = "/api/v1"
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    # Listing
    listing_default_limit: int = 20  # Page size when the caller gives none
    listing_max_limit: int = 100  # Larger requested limits are clamped to this
    listing_default_sort: str = "-created_at"  # "-field" means descending

    # Logging
    log_level: str = "INFO"

    @property
    def cors_origins_list(self) -> list[str]:
        """Convert CORS origins string to list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Global settings instance
settings = Settings()
