"""
Survey Export - FastAPI Router
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from export_shared.config.settings import ApplicationSettings
from export_shared.exceptions import DomainException
from export_shared.models.responses import ApiResponse
from tabular_sink.schema_registry import SchemaRegistry
from tabular_sink.sink import TabularSink

from survey_export.dependencies import get_app_settings, get_schema_registry, get_sink
from survey_export.errors import export_error_response
from survey_export.models import SchemaFieldInfo, SchemaInfo, SubmissionRequest

logger = logging.getLogger(__name__)

EXPORT_SUCCESS_MESSAGE = "Data exported successfully."

# Field of the legacy payload that names the destination table
USER_KEY = "username"

router = APIRouter(tags=["Export"])


async def _submit(
    sink: TabularSink,
    registry: SchemaRegistry,
    schema_name: str,
    table_name: str,
    fields: Dict[str, Any],
) -> JSONResponse:
    try:
        schema = registry.get(schema_name)
        record = await sink.submit(table_name, schema, fields)
    except DomainException as e:
        return export_error_response(e)

    return JSONResponse(
        status_code=200,
        content=ApiResponse.success(EXPORT_SUCCESS_MESSAGE, data=record.summary()).to_dict(),
    )


@router.post(
    "/export-user-data",
    summary="Export a user record",
    description="Append the posted fields to the sender's tab, creating and styling the tab on first use.",
)
async def export_user_data(
    payload: Dict[str, Any] = Body(...),
    sink: TabularSink = Depends(get_sink),
    registry: SchemaRegistry = Depends(get_schema_registry),
    settings: ApplicationSettings = Depends(get_app_settings),
) -> JSONResponse:
    """
    The destination tab is named after `username`. The remaining keys must
    match the default submission schema; `username` itself is written too
    when the schema has a column for it.
    """
    schema_name = settings.google_sheets.default_schema
    table_name = str(payload.get(USER_KEY) or "").strip()

    fields = dict(payload)
    if schema_name in registry and USER_KEY not in registry.get(schema_name).keys:
        fields.pop(USER_KEY, None)

    logger.info(f"Export request for '{table_name}' ({schema_name})")
    return await _submit(sink, registry, schema_name, table_name, fields)


@router.post(
    "/api/v1/submissions/{schema_name}",
    summary="Submit a record for a named schema",
)
async def submit_record(
    schema_name: str,
    request: SubmissionRequest,
    sink: TabularSink = Depends(get_sink),
    registry: SchemaRegistry = Depends(get_schema_registry),
) -> JSONResponse:
    logger.info(f"Submission for '{request.user}' ({schema_name})")
    return await _submit(sink, registry, schema_name, request.user.strip(), request.fields)


@router.get(
    "/api/v1/schemas",
    response_model=List[SchemaInfo],
    summary="List submission schemas",
)
async def list_schemas(registry: SchemaRegistry = Depends(get_schema_registry)) -> List[SchemaInfo]:
    schemas = []
    for name in registry.names():
        schema = registry.get(name)
        schemas.append(
            SchemaInfo(
                name=schema.name,
                version=schema.version,
                fields=[
                    SchemaFieldInfo(
                        key=f.key, label=f.label, column_class=f.column_class.value, required=f.required
                    )
                    for f in schema.fields
                ],
            )
        )
    return schemas
