"""
Mapping from classified errors to HTTP responses

Callers get a generic message plus the error code. Backend payloads stay in
the logs.
"""

import logging
from typing import List, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse

from export_shared.exceptions import DomainException, SchemaMismatch, UnknownSchema
from export_shared.models.responses import ApiResponse

logger = logging.getLogger(__name__)

EXPORT_FAILED_MESSAGE = "Failed to export data."


def status_code_for(exc: DomainException) -> int:
    if isinstance(exc, UnknownSchema):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, SchemaMismatch):
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def export_error_response(exc: DomainException) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"Export failed [{exc.code}]: {exc.message} {exc.details}")
    else:
        logger.info(f"Export rejected [{exc.code}]: {exc.message}")

    errors: Optional[List[str]] = None
    if isinstance(exc, SchemaMismatch):
        errors = [f"missing field: {k}" for k in exc.missing] + [f"unexpected field: {k}" for k in exc.unexpected]
        errors = errors or [exc.message]
    elif isinstance(exc, UnknownSchema):
        errors = [exc.message]

    return JSONResponse(
        status_code=status_code,
        content=ApiResponse.error(EXPORT_FAILED_MESSAGE, error_code=exc.code, errors=errors).to_dict(),
    )


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    return export_error_response(exc)
