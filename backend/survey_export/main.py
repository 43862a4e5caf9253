"""
Survey Export Service
Appends survey submissions to a per-user tab of a Google Sheets workbook

Port: 3000 (PORT)
"""

from dotenv import load_dotenv

load_dotenv()  # Load .env file

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from data_connector.google_sheets.auth import ServiceAccountCredentialProvider
from data_connector.google_sheets.service import GoogleSheetsWorkbookClient
from export_shared.config.settings import ApplicationSettings, get_settings
from export_shared.exceptions import ConfigurationError, DomainException
from export_shared.interfaces.tabular_store import TabularStore
from export_shared.services.service_factory import ServiceInfo, create_fastapi_service, run_service
from export_shared.utils.app_logger import configure_logging, get_logger
from survey_export.errors import domain_exception_handler
from survey_export.routers.export_router import router as export_router
from tabular_sink.layout import SheetLayout
from tabular_sink.schema_registry import default_registry
from tabular_sink.sink import TabularSink

settings = get_settings()
configure_logging(settings.log_level)
logger = get_logger(__name__)

SURVEY_EXPORT_SERVICE_INFO = ServiceInfo(
    name="SurveyExport",
    title="Survey Export Service",
    description="Appends survey submissions to per-user Google Sheets tabs",
    version=settings.services.service_version,
    port=settings.services.port,
    host=settings.services.host,
    tags=[{"name": "Export", "description": "Record submission"}],
)


def build_workbook_client(app_settings: ApplicationSettings) -> GoogleSheetsWorkbookClient:
    """
    Load the credential bundle and build the Sheets client

    Raises:
        ConfigurationError: workbook ID or credentials missing
    """
    sheets_settings = app_settings.google_sheets
    if not sheets_settings.spreadsheet_id:
        raise ConfigurationError("SPREADSHEET_ID is not set")

    credentials = ServiceAccountCredentialProvider.from_settings(sheets_settings)
    return GoogleSheetsWorkbookClient(
        credentials,
        base_url=sheets_settings.google_sheets_api_base_url,
        timeout=sheets_settings.google_sheets_request_timeout,
    )


def build_sink(app_settings: ApplicationSettings, store: TabularStore) -> TabularSink:
    sheets_settings = app_settings.google_sheets
    return TabularSink(
        store,
        sheets_settings.spreadsheet_id,
        layout=SheetLayout(body_prefill_rows=sheets_settings.google_sheets_body_prefill_rows),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the export sink on startup, close the Sheets client on shutdown"""
    logger.info(f"Survey Export Service starting ({settings.environment.value})")

    app.state.schema_registry = default_registry()
    client: Optional[GoogleSheetsWorkbookClient] = None
    try:
        client = build_workbook_client(settings)
        app.state.sink = build_sink(settings, client)
        logger.info(f"Exporting to workbook {settings.google_sheets.spreadsheet_id}")
    except ConfigurationError as e:
        # Health endpoints stay up; export requests answer CONFIGURATION_ERROR
        app.state.sink = None
        logger.error(f"Export sink not configured: {e.message}")

    yield

    if client is not None:
        await client.close()
    logger.info("Survey Export Service stopped")


app = create_fastapi_service(
    service_info=SURVEY_EXPORT_SERVICE_INFO,
    service_settings=settings.services,
    custom_lifespan=lifespan,
    include_health_check=True,
    include_logging_middleware=True,
)
app.add_exception_handler(DomainException, domain_exception_handler)

app.include_router(export_router)


def main() -> None:
    run_service(app, SURVEY_EXPORT_SERVICE_INFO, "survey_export.main:app")


if __name__ == "__main__":
    main()
