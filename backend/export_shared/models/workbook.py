"""
Workbook-level models exchanged between the tabular sink and a tabular store
"""

import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


class SheetProperties(BaseModel):
    """One tab of a workbook"""

    sheet_id: int = Field(..., description="Numeric tab ID (gid)")
    title: str = Field(..., description="Tab title")
    index: Optional[int] = Field(None, description="Position of the tab in the workbook")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_api(cls, properties: Dict[str, Any]) -> "SheetProperties":
        return cls(
            sheet_id=int(properties["sheetId"]),
            title=str(properties["title"]),
            index=properties.get("index"),
        )


class GridRange(BaseModel):
    """Structured, zero-based half-open coordinates reported by a store"""

    sheet_id: Optional[int] = None
    start_row_index: int
    end_row_index: int
    start_column_index: int
    end_column_index: int

    model_config = ConfigDict(frozen=True)


class AppendResult(BaseModel):
    """Acknowledgement of an append-to-range call"""

    table_range: Optional[str] = Field(None, description="Range the store treated as the existing table")
    updated_range: Optional[str] = Field(None, description="A1 range that received the new values")
    updated_rows: Optional[int] = None
    updated_columns: Optional[int] = None
    updated_grid: Optional[GridRange] = Field(
        None, description="Structured form of the written range, when the store provides one"
    )

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "AppendResult":
        """
        Build from a Sheets `AppendValuesResponse` body

        The values are already written when this runs, so a malformed body
        yields an empty acknowledgement instead of an error.
        """
        if not isinstance(payload, dict):
            payload = {}
        updates = payload.get("updates")
        if not isinstance(updates, dict):
            updates = {}
        try:
            return cls(
                table_range=payload.get("tableRange"),
                updated_range=updates.get("updatedRange"),
                updated_rows=updates.get("updatedRows"),
                updated_columns=updates.get("updatedColumns"),
            )
        except ValidationError as e:
            logger.warning(f"Ignoring malformed append acknowledgement: {e.error_count()} invalid field(s)")
            return cls()

    def summary(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)
