from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from export_shared.config.settings import ApplicationSettings, GoogleSheetsSettings
from export_shared.exceptions import BackendUnavailable, DomainException
from export_shared.services.service_factory import ServiceInfo, create_fastapi_service
from survey_export.dependencies import get_app_settings
from survey_export.errors import domain_exception_handler
from survey_export.routers.export_router import export_user_data, router
from tabular_sink.layout import SheetLayout
from tabular_sink.schema_registry import default_registry
from tabular_sink.sink import TabularSink


def _build_app(sink):
    app = create_fastapi_service(
        ServiceInfo(name="SurveyExport", title="Survey Export Service", description="test"),
        include_logging_middleware=False,
    )
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.include_router(router)
    app.state.sink = sink
    app.state.schema_registry = default_registry()
    app.dependency_overrides[get_app_settings] = lambda: ApplicationSettings(
        google_sheets=GoogleSheetsSettings(spreadsheet_id="wb-test", default_schema="user-data")
    )
    return app


@pytest.fixture
def sink(workbook):
    return TabularSink(workbook, "wb-test", layout=SheetLayout(body_prefill_rows=5))


@pytest.fixture
def client(sink):
    return TestClient(_build_app(sink))


def test_health_does_not_touch_the_workbook(client, workbook):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "success"
    assert body["data"]["status"] == "healthy"
    assert client.get("/").json()["status"] == "running"
    assert workbook.calls == []


def test_export_user_data_success(client, workbook):
    response = client.post(
        "/export-user-data",
        json={"username": "alice", "email": "alice@example.com", "value1": "1", "value2": "2"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "success"
    assert body["message"] == "Data exported successfully."
    assert body["data"]["table_name"] == "alice"
    assert body["data"]["row"] == 3
    assert workbook.rows("alice", 4)[2] == ["alice", "alice@example.com", "1", "2"]


def test_export_user_data_trims_the_user_name(client, workbook):
    response = client.post("/export-user-data", json={"username": "  alice ", "email": "a@example.com"})

    assert response.status_code == 200
    assert response.json()["data"]["table_name"] == "alice"
    assert list(workbook.tabs) == ["alice"]


def test_export_user_data_missing_field_is_400(client, workbook):
    response = client.post("/export-user-data", json={"username": "alice", "value1": "1"})

    assert response.status_code == 400
    assert response.json() == {
        "status": "error",
        "message": "Failed to export data.",
        "errors": ["missing field: email"],
        "error_code": "SCHEMA_MISMATCH",
    }
    assert workbook.calls == []


def test_export_user_data_without_username_is_400(client):
    response = client.post("/export-user-data", json={"email": "x@example.com"})

    assert response.status_code == 400
    assert response.json()["error_code"] == "SCHEMA_MISMATCH"


def test_backend_failure_is_500_without_backend_details(client, workbook):
    workbook.failures["list_tables"] = BackendUnavailable(
        "Workbook rejected list_tables (HTTP 403)",
        operation="list_tables",
        details={"status_code": 403, "backend_message": "The caller does not have permission"},
    )

    response = client.post("/export-user-data", json={"username": "alice", "email": "a@example.com"})

    assert response.status_code == 500
    body = response.json()
    assert body == {"status": "error", "message": "Failed to export data.", "error_code": "BACKEND_UNAVAILABLE"}


def test_unconfigured_sink_is_500_configuration_error(workbook):
    client = TestClient(_build_app(None))

    response = client.post("/export-user-data", json={"username": "alice", "email": "a@example.com"})

    assert response.status_code == 500
    assert response.json()["error_code"] == "CONFIGURATION_ERROR"
    assert client.get("/health").status_code == 200


def test_submission_for_named_schema(client, workbook):
    response = client.post(
        "/api/v1/submissions/survey-feedback",
        json={"user": "bob", "fields": {"age": 52, "comments": "More vegetables please"}},
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["values"] == ["52", "More vegetables please"]
    assert data["styled"] is True
    assert workbook.rows("bob", 2)[1] == ["Age", "Further comments"]


def test_submission_for_unknown_schema_is_404(client, workbook):
    response = client.post("/api/v1/submissions/nope", json={"user": "bob", "fields": {}})

    assert response.status_code == 404
    assert response.json()["error_code"] == "UNKNOWN_SCHEMA"
    assert workbook.calls == []


def test_submission_request_validation(client):
    response = client.post("/api/v1/submissions/survey-feedback", json={"user": "", "fields": {}})
    assert response.status_code == 422


def test_list_schemas(client):
    response = client.get("/api/v1/schemas")

    assert response.status_code == 200
    schemas = {s["name"]: s for s in response.json()}
    assert set(schemas) == {"user-data", "survey-feedback"}
    comments = schemas["survey-feedback"]["fields"][1]
    assert comments == {"key": "comments", "label": "Further comments", "column_class": "wrapped", "required": True}


@pytest.mark.asyncio
async def test_export_handler_called_directly(sink, workbook):
    settings = ApplicationSettings(google_sheets=GoogleSheetsSettings(default_schema="user-data"))

    response = await export_user_data(
        payload={"username": "carol", "email": "carol@example.com"},
        sink=sink,
        registry=default_registry(),
        settings=settings,
    )

    assert response.status_code == 200
    body = json.loads(response.body)
    assert body["data"]["values"] == ["carol", "carol@example.com", "", ""]
