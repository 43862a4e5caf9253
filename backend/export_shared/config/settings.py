"""
Centralized configuration for the survey export service

Pydantic Settings binds every option to an environment variable (or a `.env`
file outside of containers), so the service has a single typed source of truth:

- GoogleSheetsSettings: destination workbook, credential bundle, call timeout
- ServiceSettings: HTTP host/port and CORS
- ApplicationSettings: aggregate of the above plus environment flags
"""

import json
import os
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _settings_config() -> SettingsConfigDict:
    return SettingsConfigDict(
        env_file=".env" if not os.getenv("DOCKER_CONTAINER") else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class Environment(str, Enum):
    """Application environment types"""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TEST = "test"


class GoogleSheetsSettings(BaseSettings):
    """Destination workbook and credential settings"""

    model_config = _settings_config()

    spreadsheet_id: str = Field(
        default="",
        description="ID of the workbook that receives one tab per user",
    )
    service_account_key_file: Optional[str] = Field(
        default=None,
        description="Path to the service account JSON key file",
    )
    google_service_account_json: Optional[str] = Field(
        default=None,
        description="Inline service account JSON (takes precedence over the key file)",
    )
    google_application_credentials: Optional[str] = Field(
        default=None,
        description="Fallback key file path used by Google client libraries",
    )
    google_sheets_scopes: str = Field(
        default="https://www.googleapis.com/auth/spreadsheets",
        description="Space separated OAuth scopes requested for the service account",
    )
    google_sheets_api_base_url: str = Field(
        default="https://sheets.googleapis.com/v4/spreadsheets",
        description="Sheets REST API base URL",
    )
    google_sheets_request_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds applied to every outbound Sheets call",
    )
    google_sheets_body_prefill_rows: int = Field(
        default=998,
        description="Rows below the header that receive body formatting at provisioning time",
    )
    default_schema: str = Field(
        default="user-data",
        description="Submission schema used by the legacy /export-user-data endpoint",
    )

    @field_validator("google_sheets_body_prefill_rows")
    @classmethod
    def _positive_prefill(cls, v: int) -> int:
        if v < 1:
            raise ValueError("google_sheets_body_prefill_rows must be >= 1")
        return v

    @property
    def key_file_path(self) -> Optional[str]:
        """Key file to load when no inline JSON is configured"""
        return self.service_account_key_file or self.google_application_credentials

    @property
    def scopes(self) -> List[str]:
        return [s for s in self.google_sheets_scopes.split() if s]


class ServiceSettings(BaseSettings):
    """HTTP service settings"""

    model_config = _settings_config()

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=3000, description="Bind port")
    service_version: str = Field(default="1.0.0", description="Reported service version")

    cors_enabled: bool = Field(default=True, description="Enable CORS")
    cors_origins: str = Field(
        default='["*"]',
        description="CORS allowed origins (JSON array string)",
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from JSON string"""
        try:
            origins = json.loads(self.cors_origins)
        except (json.JSONDecodeError, TypeError):
            return ["*"]
        if isinstance(origins, str):
            return [origins]
        return [str(o) for o in origins] or ["*"]


class ApplicationSettings(BaseSettings):
    """Main application settings - aggregates all other settings"""

    model_config = _settings_config()

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )
    log_level: str = Field(default="INFO", description="Root log level")

    google_sheets: GoogleSheetsSettings = Field(default_factory=GoogleSheetsSettings)
    services: ServiceSettings = Field(default_factory=ServiceSettings)


settings = ApplicationSettings()


def get_settings() -> ApplicationSettings:
    """
    Get the global settings instance

    Usable with FastAPI's Depends() for dependency injection.
    """
    return settings


def reload_settings() -> ApplicationSettings:
    """Reload settings from environment (useful for testing)"""
    global settings
    settings = ApplicationSettings()
    return settings
