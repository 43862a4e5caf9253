"""
Tabular sink exceptions

Every failure of the "submit a record" workflow surfaces as one of these
classified errors. Raw transport or backend payloads stay in `details` for
logging and are never echoed to callers.
"""

from typing import Any, Dict, List, Optional

from .base import DomainException


class SinkError(DomainException):
    """Base class for classified tabular sink errors"""


class BackendUnavailable(SinkError):
    """An outbound call to the destination workbook did not complete"""

    def __init__(self, message: str, operation: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None, code: str = "BACKEND_UNAVAILABLE"):
        merged = dict(details or {})
        if operation:
            merged.setdefault("operation", operation)
        super().__init__(message=message, code=code, details=merged)
        self.operation = operation


class BackendTimeout(BackendUnavailable):
    """An outbound call timed out; whether it took effect is unknown"""

    def __init__(self, operation: str, timeout: Optional[float] = None):
        super().__init__(
            message=f"Timed out waiting for workbook operation '{operation}'",
            operation=operation,
            details={"timeout": timeout, "outcome": "unknown"},
            code="BACKEND_TIMEOUT",
        )


class TableAlreadyExists(SinkError):
    """The workbook refused to create a tab because the title is taken"""

    def __init__(self, table_name: str):
        super().__init__(
            message=f"Table already exists: {table_name}",
            code="TABLE_ALREADY_EXISTS",
            details={"table_name": table_name},
        )
        self.table_name = table_name


class SchemaMismatch(SinkError):
    """The inbound record does not line up with the submission schema"""

    def __init__(self, message: str, schema_name: Optional[str] = None,
                 missing: Optional[List[str]] = None, unexpected: Optional[List[str]] = None):
        details: Dict[str, Any] = {}
        if schema_name:
            details["schema"] = schema_name
        if missing:
            details["missing"] = list(missing)
        if unexpected:
            details["unexpected"] = list(unexpected)
        super().__init__(message=message, code="SCHEMA_MISMATCH", details=details)
        self.missing = list(missing or [])
        self.unexpected = list(unexpected or [])


class UnknownSchema(SinkError):
    """No submission schema is registered under the requested name"""

    def __init__(self, schema_name: str):
        super().__init__(
            message=f"Unknown submission schema: {schema_name}",
            code="UNKNOWN_SCHEMA",
            details={"schema": schema_name},
        )
        self.schema_name = schema_name


class AmbiguousAppendPosition(SinkError):
    """The append acknowledgement did not identify the written row"""

    def __init__(self, message: str, fallback_region: Any, acknowledgement: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code="AMBIGUOUS_APPEND_POSITION",
            details={"acknowledgement": acknowledgement or {}},
        )
        self.fallback_region = fallback_region


class PartialProvision(SinkError):
    """The table exists but its header or provisioning style is not in place"""

    def __init__(self, table_name: str, reason: str, details: Optional[Dict[str, Any]] = None):
        merged = {"table_name": table_name, "reason": reason}
        merged.update(details or {})
        super().__init__(
            message=f"Table '{table_name}' is only partially provisioned: {reason}",
            code="PARTIAL_PROVISION",
            details=merged,
        )
        self.table_name = table_name
        self.reason = reason
