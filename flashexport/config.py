"""
Centralized configuration management for flashexport.
"""
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DEFAULT_DECK_NAME


class Settings(BaseSettings):
    """
    Defines application settings, loaded from environment variables or .env files.
    """
    model_config = SettingsConfigDict(
        env_prefix="FLASHEXPORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Deck name used when neither the caller nor the card source names one.
    default_deck_name: str = DEFAULT_DECK_NAME

    # Where the CLI writes export files unless --output-dir is given.
    export_dir: Path = Path(".")

    # Where the CLI looks for YAML decks unless a source is given.
    source_dir: Path = Path("./flashcards")

    log_level: str = "INFO"


settings = Settings()
