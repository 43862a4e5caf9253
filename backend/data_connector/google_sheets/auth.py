"""
Google Sheets Connector - Service account credential provider

The credential bundle (identity + private key) is loaded once at process start.
Access tokens minted from it are refreshed by google-auth when they expire; key
rotation is outside the service's responsibility.
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from export_shared.config.settings import GoogleSheetsSettings
from export_shared.exceptions import BackendTimeout, BackendUnavailable, ConfigurationError

logger = logging.getLogger(__name__)

SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


class ServiceAccountCredentialProvider:
    """
    Hands out bearer tokens for a Google service account

    google-auth's refresh is blocking, so it runs in a worker thread; a lock
    keeps concurrent requests from refreshing the same credentials twice.
    """

    def __init__(self, credentials: Any, refresh_timeout: Optional[float] = 30.0):
        self._credentials = credentials
        self._refresh_timeout = refresh_timeout
        self._lock = asyncio.Lock()

    @classmethod
    def from_service_account_info(
        cls, info: Dict[str, Any], scopes: Optional[List[str]] = None, refresh_timeout: Optional[float] = 30.0
    ) -> "ServiceAccountCredentialProvider":
        credentials = service_account.Credentials.from_service_account_info(info, scopes=scopes or SHEETS_SCOPES)
        return cls(credentials, refresh_timeout=refresh_timeout)

    @classmethod
    def from_service_account_file(
        cls, path: str, scopes: Optional[List[str]] = None, refresh_timeout: Optional[float] = 30.0
    ) -> "ServiceAccountCredentialProvider":
        credentials = service_account.Credentials.from_service_account_file(path, scopes=scopes or SHEETS_SCOPES)
        return cls(credentials, refresh_timeout=refresh_timeout)

    @classmethod
    def from_settings(cls, settings: GoogleSheetsSettings) -> "ServiceAccountCredentialProvider":
        """
        Load the credential bundle named by the settings

        Inline JSON (`GOOGLE_SERVICE_ACCOUNT_JSON`) wins over a key file
        (`SERVICE_ACCOUNT_KEY_FILE`, then `GOOGLE_APPLICATION_CREDENTIALS`).

        Raises:
            ConfigurationError: no bundle configured, or the bundle is unreadable
        """
        scopes = settings.scopes or SHEETS_SCOPES
        timeout = settings.google_sheets_request_timeout

        raw = (settings.google_service_account_json or "").strip()
        if raw:
            try:
                info = json.loads(raw)
                return cls.from_service_account_info(info, scopes=scopes, refresh_timeout=timeout)
            except (ValueError, KeyError) as e:
                raise ConfigurationError("GOOGLE_SERVICE_ACCOUNT_JSON is not a valid service account key") from e

        path = settings.key_file_path
        if path:
            try:
                return cls.from_service_account_file(path, scopes=scopes, refresh_timeout=timeout)
            except (OSError, ValueError, KeyError) as e:
                raise ConfigurationError(
                    "Service account key file could not be loaded", details={"path": path}
                ) from e

        raise ConfigurationError(
            "No service account credentials configured "
            "(set GOOGLE_SERVICE_ACCOUNT_JSON or SERVICE_ACCOUNT_KEY_FILE)"
        )

    @property
    def service_account_email(self) -> Optional[str]:
        return getattr(self._credentials, "service_account_email", None)

    async def get_access_token(self) -> str:
        """Return a valid bearer token, refreshing it first if needed"""
        async with self._lock:
            if not self._credentials.valid:
                await self._refresh()
            return self._credentials.token

    async def _refresh(self) -> None:
        logger.debug(f"Refreshing access token for {self.service_account_email}")
        try:
            await asyncio.wait_for(
                asyncio.to_thread(self._credentials.refresh, Request()),
                timeout=self._refresh_timeout,
            )
        except asyncio.TimeoutError as e:
            raise BackendTimeout("refresh_token", self._refresh_timeout) from e
        except GoogleAuthError as e:
            raise BackendUnavailable(
                "Could not obtain an access token for the service account",
                operation="refresh_token",
                details={"error": type(e).__name__},
            ) from e
