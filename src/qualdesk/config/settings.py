"""Application settings and configuration."""

from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ALLOWED_PAGE_SIZES = (10, 25, 50, 100)


def get_default_data_dir() -> Path:
    """Return the default data directory."""
    return Path.home() / ".qualdesk"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="QUALDESK_",
    )

    app_name: str = "Qualification Desk"
    app_version: str = "0.1.0"

    # Data directory (local database and exports live here)
    data_dir: Optional[Path] = None

    # Database URL (derived from data_dir if not set explicitly)
    database_url: Optional[str] = None

    log_level: str = "INFO"

    # Cache settings
    cache_ttl_seconds: int = 300
    stats_cache_ttl_seconds: int = 300

    # View settings
    page_size: int = 10
    assistant_row_limit: int = 100

    # Working sessions kept open at once; least recently used idle ones are closed
    max_sessions: int = 64

    @field_validator("page_size")
    @classmethod
    def check_page_size(cls, v: int) -> int:
        if v not in ALLOWED_PAGE_SIZES:
            raise ValueError(f"page_size must be one of {ALLOWED_PAGE_SIZES}")
        return v

    def get_data_dir(self) -> Path:
        """Get the data directory, creating it if needed."""
        data_dir = self.data_dir or get_default_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def get_database_url(self) -> str:
        """Get database URL, deriving from data_dir if not set."""
        if self.database_url:
            return self.database_url
        db_path = self.get_data_dir() / "qualdesk.db"
        return f"sqlite+aiosqlite:///{db_path}"


# Global settings instance (can be replaced at runtime)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the current settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset settings to force reload."""
    global _settings
    _settings = None
