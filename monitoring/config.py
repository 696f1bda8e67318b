"""Application settings loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Tuple

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

from monitoring.errors import ConfigurationError


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # Google Sheets
    google_sheets_api_key: str = ""
    tracking_sheet_id: str = Field(
        default="",
        validation_alias=AliasChoices("tracking_sheet_id", "sheet1_id", "next_public_sheet1_id"),
    )
    issues_sheet_id: str = Field(
        default="",
        validation_alias=AliasChoices("issues_sheet_id", "sheet2_id", "next_public_sheet2_id"),
    )

    # Ranges (A1 notation, tab included)
    alerts_range: str = "Alert_Tracking!A:F"
    misalignment_range: str = "Misalignment_Tracking!A:F"
    issues_range: str = "Issues-Realtime!A:Z"

    # Aggregation
    no_alerts_marker: str = "No L2 alerts found"
    issue_category: str = "historical video request"

    # HTTP
    request_timeout: float = 30.0
    cors_origins: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    def sheet_credentials(self, sheet_field: str) -> Tuple[str, str]:
        """Return ``(api_key, sheet_id)`` or raise when either is blank."""
        api_key = (self.google_sheets_api_key or "").strip()
        sheet_id = (getattr(self, sheet_field, "") or "").strip()
        if not api_key or not sheet_id:
            raise ConfigurationError("Missing API key or Sheet ID")
        return api_key, sheet_id

    def is_configured(self, sheet_field: str) -> bool:
        try:
            self.sheet_credentials(sheet_field)
        except ConfigurationError:
            return False
        return True


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
