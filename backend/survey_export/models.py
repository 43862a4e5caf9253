"""
Survey Export - Request/Response Models
"""

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class SubmissionRequest(BaseModel):
    """Record submitted against a named schema"""

    user: str = Field(..., min_length=1, description="Submitting user; selects the destination table")
    fields: Dict[str, Any] = Field(default_factory=dict, description="Field key -> scalar value")


class SchemaFieldInfo(BaseModel):
    key: str
    label: str
    column_class: str
    required: bool


class SchemaInfo(BaseModel):
    name: str
    version: int
    fields: List[SchemaFieldInfo]
