"""
Configuration management using environment variables
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from datetime import timedelta
from typing import List
import os

class Settings(BaseSettings):
    """Application settings from environment variables"""

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # API Info
    api_title: str = "ANPR Event Backend"
    api_version: str = "1.0.0"
    api_description: str = "Backend API for ANPR camera event logging and documentation"

    # Storage
    database_url: str = "sqlite:///output/anpr_events.db"
    video_root: str = "output/videos"

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:5173"

    # Logging
    log_level: str = "INFO"

    # Vehicle event correlation
    correlation_window_minutes: int = 120
    grouping_window_hours: int = 4
    migration_window_minutes: int = 30
    default_confidence: float = 95.0

    # Timeout sweeper
    timeout_minutes: int = 30
    timeout_sweep_interval_seconds: int = 60
    enable_timeout_sweeper: bool = True

    # Pydantic v2 settings config
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    @property
    def allowed_origins_list(self) -> List[str]:
        """Parse comma-separated origins into list"""
        return [origin.strip() for origin in self.allowed_origins.split(",")]

    @property
    def correlation_window(self) -> timedelta:
        return timedelta(minutes=self.correlation_window_minutes)

    @property
    def grouping_window(self) -> timedelta:
        return timedelta(hours=self.grouping_window_hours)

    @property
    def migration_window(self) -> timedelta:
        return timedelta(minutes=self.migration_window_minutes)

    def get_absolute_path(self, relative_path: str) -> str:
        """Convert relative path to absolute"""
        return os.path.abspath(relative_path)

@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance"""
    return Settings()
