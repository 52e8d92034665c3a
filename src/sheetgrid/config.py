"""Library configuration using pydantic-settings.

Every value can be overridden with a SHEETGRID_-prefixed environment
variable (e.g. SHEETGRID_TIMEOUT=30) or a .env file in the working directory.
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SHEETS_API_BASE = "https://sheets.googleapis.com/v4/spreadsheets"
DRIVE_API_BASE = "https://www.googleapis.com/drive/v3"


class Settings(BaseSettings):
    """Settings shared by the transport, sync engine and ACL client."""

    model_config = SettingsConfigDict(
        env_prefix="SHEETGRID_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Endpoints
    sheets_api_base: str = SHEETS_API_BASE
    drive_api_base: str = DRIVE_API_BASE

    # HTTP request timeout in seconds
    timeout: int = 60

    # Upper bound of cells per values:batchUpdate request.
    # None sends every dirty cell in a single request.
    max_cells_per_request: int | None = None

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False

    @field_validator("sheets_api_base", "drive_api_base")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("timeout")
    @classmethod
    def timeout_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("timeout must be positive")
        return value

    @field_validator("max_cells_per_request")
    @classmethod
    def batch_size_positive(cls, value: int | None) -> int | None:
        if value is not None and value <= 0:
            raise ValueError("max_cells_per_request must be positive or unset")
        return value

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
