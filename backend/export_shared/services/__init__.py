"""
Shared services module

Import services from their module directly:
    from export_shared.services.service_factory import create_fastapi_service
"""
