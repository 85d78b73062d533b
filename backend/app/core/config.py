"""
LineWatch Configuration
Central configuration loaded from environment variables.
"""

from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # App
    APP_NAME: str = "LineWatch"
    LINEWATCH_ENV: str = "development"
    DEBUG: bool = True

    # Database
    DATABASE_URL: str = "sqlite:///./linewatch.db"
    SEED_REGISTRY: bool = True

    # CORS
    CORS_ORIGINS: str = "http://localhost:5173,http://localhost:3000,http://localhost:8000"

    # Ingestion
    DEFAULT_CONFIDENCE: float = 0.95
    INSERT_BATCH_SIZE: int = Field(default=100, gt=0)  # Rows per bulk-insert transaction
    EVENTS_PAGE_LIMIT: int = 500

    # Sample data
    SAMPLE_HOURS: int = Field(default=8, gt=0)
    SAMPLE_INTERVAL_MINUTES: int = Field(default=5, gt=0)

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",")]

    class Config:
        env_file = Path(__file__).resolve().parent.parent.parent / ".env"
        extra = "allow"


settings = Settings()
