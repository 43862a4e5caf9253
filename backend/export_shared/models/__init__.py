"""
Shared model definitions
"""

from .responses import ApiResponse
from .workbook import AppendResult, GridRange, SheetProperties

__all__ = ["ApiResponse", "AppendResult", "GridRange", "SheetProperties"]
