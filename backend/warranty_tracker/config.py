"""Application configuration helpers."""

from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    """Centralized configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Warranty Tracker"
    environment: str = "dev"

    # "sql" persists to the products table, "memory" keeps records in-process
    store_backend: Literal["sql", "memory"] = "sql"

    # Database connection pieces (fallback to local sqlite for dev/testing via DATABASE_URL)
    database_url: Optional[str] = None
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "warranty"
    postgres_user: str = "warranty"
    postgres_password: str = "secret"
    postgres_sslmode: str = "prefer"

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"

    # Confidence below which the extraction agent flags fields; reported by the review queue
    verify_confidence_floor: float = Field(0.8, ge=0.0, le=1.0)

    # API behavior
    api_host: str = "127.0.0.1"
    api_port: int = 8000
    allow_origins: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    def get_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+psycopg2://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
            f"?sslmode={self.postgres_sslmode}"
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
