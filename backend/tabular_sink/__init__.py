"""
Tabular sink: ensure a per-user table exists, then append a styled row
"""

from .layout import SheetLayout
from .models import (
    DEFAULT_STYLE_TEMPLATE,
    AppendedRecord,
    CellRegion,
    ColumnClass,
    SchemaField,
    StyleRole,
    StyleTemplate,
    SubmissionSchema,
    TableLocator,
)
from .schema_registry import SchemaRegistry, default_registry
from .sink import TabularSink
from .styling import apply_style

__all__ = [
    "DEFAULT_STYLE_TEMPLATE",
    "AppendedRecord",
    "CellRegion",
    "ColumnClass",
    "SchemaField",
    "SchemaRegistry",
    "SheetLayout",
    "StyleRole",
    "StyleTemplate",
    "SubmissionSchema",
    "TableLocator",
    "TabularSink",
    "apply_style",
    "default_registry",
]
