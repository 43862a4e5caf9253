"""
Survey Export Dependencies

The sink and the schema registry are built once in the application lifespan
and stored on `app.state`; handlers receive them through `Depends()` so tests
can pass fakes straight in.
"""

from fastapi import Request

from export_shared.config.settings import ApplicationSettings, get_settings
from export_shared.exceptions import ConfigurationError
from tabular_sink.schema_registry import SchemaRegistry, default_registry
from tabular_sink.sink import TabularSink


def get_sink(request: Request) -> TabularSink:
    sink = getattr(request.app.state, "sink", None)
    if sink is None:
        raise ConfigurationError("export sink is not configured")
    return sink


def get_schema_registry(request: Request) -> SchemaRegistry:
    registry = getattr(request.app.state, "schema_registry", None)
    if registry is None:
        registry = default_registry()
        request.app.state.schema_registry = registry
    return registry


def get_app_settings() -> ApplicationSettings:
    return get_settings()
