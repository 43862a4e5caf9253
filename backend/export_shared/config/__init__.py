"""
Unified configuration access point

    from export_shared.config import get_settings

    settings = get_settings()
    spreadsheet_id = settings.google_sheets.spreadsheet_id
"""

from .settings import (
    ApplicationSettings,
    Environment,
    GoogleSheetsSettings,
    ServiceSettings,
    get_settings,
    reload_settings,
)

__all__ = [
    "ApplicationSettings",
    "Environment",
    "GoogleSheetsSettings",
    "ServiceSettings",
    "get_settings",
    "reload_settings",
]
