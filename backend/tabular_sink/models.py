"""
Tabular sink data model

Schemas, locators, regions and style templates are immutable values; nothing
here is cached or shared between requests.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from export_shared.exceptions import SchemaMismatch


class ColumnClass(str, Enum):
    """Styling category of a column, independent of the field's type"""

    COMPACT = "compact"
    WRAPPED = "wrapped"


class WrapStrategy(str, Enum):
    WRAP = "wrap"
    OVERFLOW = "overflow"

    @property
    def api_value(self) -> str:
        return "WRAP" if self is WrapStrategy.WRAP else "OVERFLOW_CELL"


class StyleRole(str, Enum):
    HEADER = "header"
    BODY_DEFAULT = "body-default"
    APPENDED_ROW = "appended-row"


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------


class SchemaField(BaseModel):
    """One destination column"""

    key: str = Field(..., min_length=1, description="Key of the value in the inbound record")
    label: str = Field(..., description="Header label written to the destination table")
    column_class: ColumnClass = Field(default=ColumnClass.COMPACT)
    required: bool = Field(default=True, description="Reject records that omit this key")

    model_config = ConfigDict(frozen=True)


class SubmissionSchema(BaseModel):
    """Ordered column layout for one submission type"""

    name: str = Field(..., min_length=1)
    version: int = Field(default=1, ge=1)
    fields: Tuple[SchemaField, ...] = Field(..., min_length=1)

    model_config = ConfigDict(frozen=True)

    @field_validator("fields")
    @classmethod
    def _unique_keys(cls, v: Tuple[SchemaField, ...]) -> Tuple[SchemaField, ...]:
        seen = set()
        for f in v:
            if f.key in seen:
                raise ValueError(f"Duplicate field key: {f.key}")
            seen.add(f.key)
        return v

    @property
    def keys(self) -> List[str]:
        return [f.key for f in self.fields]

    @property
    def labels(self) -> List[str]:
        return [f.label for f in self.fields]

    @property
    def column_classes(self) -> List[ColumnClass]:
        return [f.column_class for f in self.fields]

    @property
    def width(self) -> int:
        return len(self.fields)

    def align(self, values: Mapping[str, Any]) -> List[str]:
        """
        Order a record's values by field and stringify them

        Raises:
            SchemaMismatch: required keys missing, unknown keys present, or a
                non-scalar value
        """
        known = set(self.keys)
        missing = [f.key for f in self.fields if f.required and f.key not in values]
        unexpected = sorted(k for k in values if k not in known)
        if missing or unexpected:
            raise SchemaMismatch(
                f"Record does not match schema '{self.name}'",
                schema_name=self.name,
                missing=missing,
                unexpected=unexpected,
            )

        row: List[str] = []
        for f in self.fields:
            value = values.get(f.key)
            if isinstance(value, (dict, list, tuple, set)):
                raise SchemaMismatch(
                    f"Field '{f.key}' must be a scalar value",
                    schema_name=self.name,
                )
            row.append(stringify_cell(value))
        return row


def stringify_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    return str(value)


# ---------------------------------------------------------------------------
# Locations
# ---------------------------------------------------------------------------


class TableLocator(BaseModel):
    """Where a backing table lives; immutable once resolved"""

    workbook_id: str
    table_id: int
    table_name: str

    model_config = ConfigDict(frozen=True)


@dataclass(frozen=True)
class CellRegion:
    """Rectangular, zero-based, half-open area of one table"""

    table_id: int
    row_start: int
    row_end: int
    col_start: int
    col_end: int

    def __post_init__(self) -> None:
        if self.row_start < 0 or self.col_start < 0:
            raise ValueError("Region coordinates must be >= 0")
        if self.row_end <= self.row_start or self.col_end <= self.col_start:
            raise ValueError(
                f"Region must be non-empty: rows [{self.row_start}, {self.row_end}), "
                f"cols [{self.col_start}, {self.col_end})"
            )

    @property
    def row_count(self) -> int:
        return self.row_end - self.row_start

    @property
    def col_count(self) -> int:
        return self.col_end - self.col_start

    @property
    def display_row(self) -> int:
        """1-based number of the first row, as shown in the spreadsheet UI"""
        return self.row_start + 1

    def overlaps(self, other: "CellRegion") -> bool:
        return (
            self.table_id == other.table_id
            and self.row_start < other.row_end
            and other.row_start < self.row_end
            and self.col_start < other.col_end
            and other.col_start < self.col_end
        )

    def to_grid_range(self) -> Dict[str, int]:
        return {
            "sheetId": self.table_id,
            "startRowIndex": self.row_start,
            "endRowIndex": self.row_end,
            "startColumnIndex": self.col_start,
            "endColumnIndex": self.col_end,
        }

    def to_dict(self) -> Dict[str, int]:
        return {
            "table_id": self.table_id,
            "row_start": self.row_start,
            "row_end": self.row_end,
            "col_start": self.col_start,
            "col_end": self.col_end,
        }


# ---------------------------------------------------------------------------
# Style template
# ---------------------------------------------------------------------------


class Color(BaseModel):
    """RGB colour with 0..1 channels"""

    red: float = Field(default=0.0, ge=0.0, le=1.0)
    green: float = Field(default=0.0, ge=0.0, le=1.0)
    blue: float = Field(default=0.0, ge=0.0, le=1.0)

    model_config = ConfigDict(frozen=True)

    def to_api(self) -> Dict[str, float]:
        return {"red": self.red, "green": self.green, "blue": self.blue}


class BorderStyle(BaseModel):
    style: str = Field(default="SOLID", description="Sheets border style, e.g. SOLID, DASHED")
    color: Color = Field(default_factory=Color)

    model_config = ConfigDict(frozen=True)

    def to_api(self) -> Dict[str, Any]:
        return {"style": self.style, "color": self.color.to_api()}


class FontSpec(BaseModel):
    family: Optional[str] = None
    size: Optional[int] = Field(default=None, ge=1)
    bold: Optional[bool] = None
    color: Optional[Color] = None

    model_config = ConfigDict(frozen=True)

    def to_api(self) -> Dict[str, Any]:
        text_format: Dict[str, Any] = {}
        if self.family:
            text_format["fontFamily"] = self.family
        if self.size:
            text_format["fontSize"] = self.size
        if self.bold is not None:
            text_format["bold"] = self.bold
        if self.color is not None:
            text_format["foregroundColor"] = self.color.to_api()
        return text_format


class HeaderFormat(BaseModel):
    background: Color = Field(default_factory=lambda: Color(red=0.85, green=0.85, blue=0.85))
    bold: bool = True
    border: Optional[BorderStyle] = Field(default_factory=BorderStyle)
    font: Optional[FontSpec] = None

    model_config = ConfigDict(frozen=True)


class BodyFormat(BaseModel):
    wrap_strategy: WrapStrategy = WrapStrategy.OVERFLOW
    font: Optional[FontSpec] = None

    model_config = ConfigDict(frozen=True)


class StyleTemplate(BaseModel):
    """Declarative styling applied to header, body and appended rows"""

    column_width_px: Dict[ColumnClass, int] = Field(
        default_factory=lambda: {ColumnClass.COMPACT: 120, ColumnClass.WRAPPED: 320}
    )
    header_format: HeaderFormat = Field(default_factory=HeaderFormat)
    body_format: Dict[ColumnClass, BodyFormat] = Field(
        default_factory=lambda: {
            ColumnClass.COMPACT: BodyFormat(wrap_strategy=WrapStrategy.OVERFLOW),
            ColumnClass.WRAPPED: BodyFormat(wrap_strategy=WrapStrategy.WRAP),
        }
    )
    body_border: Optional[BorderStyle] = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _covers_every_class(self) -> "StyleTemplate":
        for column_class in ColumnClass:
            if column_class not in self.column_width_px:
                raise ValueError(f"column_width_px has no entry for '{column_class.value}'")
            if column_class not in self.body_format:
                raise ValueError(f"body_format has no entry for '{column_class.value}'")
        return self

    def width_for(self, column_class: ColumnClass) -> int:
        return self.column_width_px[column_class]

    def body_for(self, column_class: ColumnClass) -> BodyFormat:
        return self.body_format[column_class]


DEFAULT_STYLE_TEMPLATE = StyleTemplate(
    header_format=HeaderFormat(font=FontSpec(family="Arial", size=11)),
    body_format={
        ColumnClass.COMPACT: BodyFormat(
            wrap_strategy=WrapStrategy.OVERFLOW, font=FontSpec(family="Arial", size=10)
        ),
        ColumnClass.WRAPPED: BodyFormat(
            wrap_strategy=WrapStrategy.WRAP, font=FontSpec(family="Arial", size=10)
        ),
    },
    body_border=BorderStyle(color=Color(red=0.8, green=0.8, blue=0.8)),
)


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------


class AppendedRecord(BaseModel):
    """Outcome of one successful submission"""

    table_name: str
    region: CellRegion
    values: List[str]
    position_confirmed: bool = Field(
        default=True, description="False when the write position fell back to the first body row"
    )
    styled: bool = Field(default=True, description="False when the post-append style batch failed")

    def summary(self) -> Dict[str, Any]:
        return {
            "table_name": self.table_name,
            "row": self.region.display_row,
            "region": self.region.to_dict(),
            "values": list(self.values),
            "position_confirmed": self.position_confirmed,
            "styled": self.styled,
        }
