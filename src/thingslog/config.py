"""Configuration management using pydantic-settings."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_THINGS_DB_PATH = (
    Path.home()
    / "Library"
    / "Group Containers"
    / "JLMPQHK86H.com.culturedcode.ThingsMac"
    / "Things Database.thingsdatabase"
    / "main.sqlite"
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="THINGSLOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server settings
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # Vault settings
    vault_path: Path | None = None
    daily_folder: str = "Daily"
    daily_note_format: str = "%Y-%m-%d"  # strftime pattern for daily note filenames
    daily_template: Path | None = None  # relative to vault root

    # Data storage (settings.json, sync log, sync markers)
    data_path: Path = Path("data")

    # Things 3 database
    things_db_path: Path = DEFAULT_THINGS_DB_PATH

    # Bypass the macOS-only platform gate (tests, copied databases)
    force_platform_support: bool = False


def get_settings() -> Settings:
    """Get application settings instance."""
    return Settings()
