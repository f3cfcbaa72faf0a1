"""Configuration management for Realms Forge using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DATA_DIR = Path(__file__).parent / "data"


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="REALMS_",
        extra="ignore",
    )

    # Catalog
    catalog_dir: Path = Field(
        default=DATA_DIR / "catalog",
        description="Directory holding parts.yaml, properties.yaml and progression.yaml",
    )
    mechanic_ids_path: Path = Field(
        default=DATA_DIR / "mechanic_ids.yaml",
        description="YAML table mapping mechanic kinds to catalog part ids",
    )

    debug: bool = Field(default=False, description="Enable debug mode")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="console", description="Log format (console or json)")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
