"""
Google Sheets Connector - Service Layer (connector library).

Async REST client for the destination workbook. This module only performs I/O
and converts transport failures into classified sink errors; the "ensure tab,
append row" workflow lives in `tabular_sink`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence

import httpx

from export_shared.exceptions import BackendTimeout, BackendUnavailable, TableAlreadyExists
from export_shared.interfaces.tabular_store import TabularStore
from export_shared.models.workbook import AppendResult, SheetProperties

from .utils import (
    SHEETS_API_BASE_URL,
    build_batch_update_url,
    build_sheets_metadata_url,
    build_sheets_values_url,
)

logger = logging.getLogger(__name__)


class AccessTokenProvider(Protocol):
    async def get_access_token(self) -> str: ...


class GoogleSheetsWorkbookClient(TabularStore):
    """Google Sheets API v4 client (read/write) for one service account."""

    def __init__(
        self,
        credentials: AccessTokenProvider,
        *,
        base_url: str = SHEETS_API_BASE_URL,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._credentials = credentials
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"Accept": "application/json", "User-Agent": "survey-export/1.0"},
            )
        return self._client

    async def _request(
        self,
        operation: str,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        token = await self._credentials.get_access_token()
        client = await self._get_client()

        try:
            response = await client.request(
                method,
                url,
                params=params,
                json=json,
                headers={"Authorization": f"Bearer {token}"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise BackendTimeout(operation, self.timeout) from e
        except httpx.HTTPStatusError as e:
            raise _status_error(operation, e.response) from e
        except httpx.HTTPError as e:
            raise BackendUnavailable(
                f"Workbook request failed: {operation}",
                operation=operation,
                details={"error": type(e).__name__},
            ) from e

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise BackendUnavailable(
                f"Workbook returned a non-JSON body: {operation}", operation=operation
            ) from e

    async def list_tables(self, workbook_id: str) -> List[SheetProperties]:
        data = await self._request(
            "list_tables",
            "GET",
            build_sheets_metadata_url(workbook_id, self.base_url),
            params={"fields": "sheets.properties(sheetId,title,index)"},
        )
        tables: List[SheetProperties] = []
        for sheet in data.get("sheets") or []:
            properties = sheet.get("properties") if isinstance(sheet, dict) else None
            if not properties or "sheetId" not in properties or "title" not in properties:
                continue
            tables.append(SheetProperties.from_api(properties))
        return tables

    async def create_table(self, workbook_id: str, title: str) -> Optional[SheetProperties]:
        try:
            data = await self._batch_update(
                "create_table",
                workbook_id,
                [{"addSheet": {"properties": {"title": title}}}],
            )
        except BackendUnavailable as e:
            message = str(e.details.get("backend_message", "")).lower()
            if e.details.get("status_code") == 400 and "already exists" in message:
                raise TableAlreadyExists(title) from e
            raise

        for reply in data.get("replies") or []:
            properties = (reply or {}).get("addSheet", {}).get("properties")
            if properties and "sheetId" in properties:
                return SheetProperties.from_api(properties)
        return None

    async def get_values(self, workbook_id: str, a1_range: str) -> List[List[Any]]:
        data = await self._request(
            "get_values",
            "GET",
            build_sheets_values_url(workbook_id, a1_range, base_url=self.base_url),
            params={"majorDimension": "ROWS", "valueRenderOption": "FORMATTED_VALUE"},
        )
        return data.get("values", [])

    async def write_range(self, workbook_id: str, a1_range: str, values: Sequence[Sequence[Any]]) -> None:
        await self._request(
            "write_range",
            "PUT",
            build_sheets_values_url(workbook_id, a1_range, base_url=self.base_url),
            params={"valueInputOption": "RAW"},
            json={"range": a1_range, "majorDimension": "ROWS", "values": [list(row) for row in values]},
        )

    async def append_to_range(
        self, workbook_id: str, a1_range: str, values: Sequence[Sequence[Any]]
    ) -> AppendResult:
        data = await self._request(
            "append_to_range",
            "POST",
            build_sheets_values_url(workbook_id, a1_range, suffix=":append", base_url=self.base_url),
            params={"valueInputOption": "RAW", "insertDataOption": "INSERT_ROWS"},
            json={"majorDimension": "ROWS", "values": [list(row) for row in values]},
        )
        return AppendResult.from_api(data)

    async def batch_format(self, workbook_id: str, requests: Sequence[Dict[str, Any]]) -> None:
        if not requests:
            return
        await self._batch_update("batch_format", workbook_id, list(requests))

    async def _batch_update(
        self, operation: str, workbook_id: str, requests: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        return await self._request(
            operation,
            "POST",
            build_batch_update_url(workbook_id, self.base_url),
            json={"requests": requests},
        )

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None


def _status_error(operation: str, response: httpx.Response) -> BackendUnavailable:
    """Classify a non-2xx response; the body is kept for logs only"""
    reason = None
    backend_message = None
    try:
        payload = response.json()
    except ValueError:
        payload = None
        backend_message = response.text[:200]

    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict):
        reason = error.get("status")
        backend_message = error.get("message")

    logger.warning(f"Sheets {operation} failed with HTTP {response.status_code} ({reason})")
    return BackendUnavailable(
        f"Workbook rejected {operation} (HTTP {response.status_code})",
        operation=operation,
        details={
            "status_code": response.status_code,
            "reason": reason,
            "backend_message": backend_message,
        },
    )
