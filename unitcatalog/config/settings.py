"""Unit catalog settings loaded from environment variables."""

from enum import StrEnum
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class Environment(StrEnum):
    """Deployment environment."""

    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"


class LogLevel(StrEnum):
    """Supported log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Service-wide settings loaded from environment variables / .env file.

    The default system name and significant digits are fixed per deployment;
    changing them between processes that share a catalog is not supported.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Global catalog ---
    UNITS_PATH: Path = Field(
        default=DATA_DIR / "units.json",
        description="Units document for the global partition.",
    )
    UNIT_SYSTEMS_PATH: Path = Field(
        default=DATA_DIR / "unitSystems.json",
        description="Unit-systems document for the global partition.",
    )
    DEFAULT_SYSTEM_NAME: str = Field(
        default="Default",
        min_length=1,
        description="Fallback system that must bind every loaded quantity.",
    )
    GLOBAL_PARTITION_NAME: str = Field(
        default="global",
        min_length=1,
        description="Name of the eagerly loaded partition.",
    )

    # --- Conversion ---
    SIGNIFICANT_DIGITS: int = Field(
        default=12,
        ge=1,
        le=17,
        description="Significant digits kept in non-identity conversion results.",
    )

    # --- Project partitions ---
    PARTITION_SOURCE_URL: str = Field(
        default="",
        description="URL template with a '{partition}' placeholder. Empty disables project partitions.",
    )
    PARTITION_FETCH_TIMEOUT_S: float = Field(
        default=30.0,
        gt=0,
        description="HTTP timeout for fetching a project catalog.",
    )

    # --- Logging ---
    LOG_LEVEL: LogLevel = Field(
        default=LogLevel.INFO,
        description="Application log level.",
    )

    # --- Environment ---
    ENVIRONMENT: Environment = Field(
        default=Environment.DEV,
        description="Deployment environment (dev/staging/prod).",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.ENVIRONMENT == Environment.PROD

    @property
    def partitions_enabled(self) -> bool:
        return bool(self.PARTITION_SOURCE_URL)


def get_settings() -> Settings:
    """Factory function for dependency injection via FastAPI Depends."""
    return Settings()
