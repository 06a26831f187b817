"""Application configuration loaded from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["*"]

    # Import defaults
    DEFAULT_IMPORT_TITLE: str = "Imported Dialogue"

    # Placeholder layout for imported nodes (the graph editor re-lays them out)
    LAYOUT_COLUMNS: int = 3
    LAYOUT_X_SPACING: int = 250
    LAYOUT_Y_SPACING: int = 180
    LAYOUT_Y_OFFSET: int = 50

    # Export
    SCRIPT_INDENT: str = "    "  # indent for choice bodies and conditional arms

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
