"""
Weather Station - Configuration
All settings loaded from environment variables
"""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./weather.db"

    # Logging
    log_level: str = "INFO"

    # Query defaults
    default_time_frame: str = "24h"
    default_limit: int = 1000

    # Retention (None = keep every reading forever)
    retention_days: int | None = None
    retention_interval: int = 3600  # seconds between purge runs

    # Dashboard poller
    api_base_url: str = "http://localhost:8000"
    poll_interval: float = 10.0  # seconds
    request_timeout: float = 10.0

    # Chart plot area (SVG units)
    chart_width: int = 300
    chart_height: int = 100

    # Ports
    api_port: int = 8000
    dashboard_port: int = 8001

    @property
    def retention_enabled(self) -> bool:
        """Check if old readings should be purged."""
        return self.retention_days is not None and self.retention_days > 0

    class Config:
        env_file = ".env"  # Fallback for local development
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
