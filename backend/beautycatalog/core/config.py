# backend/beautycatalog/core/config.py
import logging
import os
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import BRAND_NAME


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


class Settings(BaseSettings):
    """Runtime configuration for the catalog backend."""

    api_title: str = Field(default=f"{BRAND_NAME} Catalog API")
    environment: Literal["development", "test", "staging", "production"] = Field(
        default="development", description="Deployment environment"
    )
    is_testing: bool = Field(default=False, description="Set by the test harness")

    database_url: str = Field(
        default="sqlite:///./beautycatalog.db",
        description="SQLAlchemy URL of the document store",
    )
    test_database_url: Optional[str] = Field(
        default="sqlite+pysqlite:///:memory:",
        description="Database used by the test suite",
    )
    sql_echo: bool = Field(default=False, description="Echo SQL statements")

    log_level: str = Field(default="INFO", description="Root log level")

    store_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Deadline applied by API callers around each store operation",
    )
    sse_heartbeat_interval: int = Field(
        default=15, ge=1, description="Seconds between SSE keep-alive pings"
    )
    subscription_queue_size: int = Field(
        default=100,
        ge=1,
        description="Max buffered snapshots per SSE subscriber before old ones are dropped",
    )

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> str:
        if value is None:
            return "INFO"
        normalized = str(value).strip().upper()
        if normalized not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log level: {value}")
        return normalized

    @property
    def effective_database_url(self) -> str:
        """Database URL honoring test mode."""
        if (self.is_testing or is_running_tests()) and self.test_database_url:
            return self.test_database_url
        return self.database_url


settings = Settings()
