from __future__ import annotations

from pathlib import Path

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Lead Signal Engine"
    app_version: str = "0.1.0"
    environment: str = "development"
    log_level: str = "INFO"

    # Lead engine
    lead_rules_path: Path | None = None
    lead_output_dir: Path = Path("output")
    lead_sheet_path: Path | None = None

    model_config = ConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


settings = Settings()
