"""
Domain exceptions

Grouped per concern so callers can catch a whole family:
    from export_shared.exceptions import SinkError
"""

from .base import ConfigurationError, DomainException
from .sink import (
    AmbiguousAppendPosition,
    BackendTimeout,
    BackendUnavailable,
    PartialProvision,
    SchemaMismatch,
    SinkError,
    TableAlreadyExists,
    UnknownSchema,
)

__all__ = [
    "AmbiguousAppendPosition",
    "BackendTimeout",
    "BackendUnavailable",
    "ConfigurationError",
    "DomainException",
    "PartialProvision",
    "SchemaMismatch",
    "SinkError",
    "TableAlreadyExists",
    "UnknownSchema",
]
