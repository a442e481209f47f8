"""Application configuration settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "CTR Invoice Tagger"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # API
    api_v1_prefix: str = "/api/v1"

    # Database (tag store)
    database_url: str = "sqlite+aiosqlite:///./ctr_invoice.db"

    # Storage
    storage_path: Path = Path("./storage")

    # Classification
    layout_path: Path | None = None  # None uses the bundled invoice layout
    document_type: str = "INVOICE"
    flip_y_axis: bool = True  # Emit y increasing upward, as in PDF user space

    # CTR projection
    ctr_output_filename: str = "updated_CTR.xlsx"
    invoice_date_format: str = "%d-%b-%Y"
    ctr_date_format: str = "%m.%d.%Y"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
