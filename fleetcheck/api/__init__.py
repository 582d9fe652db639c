"""Routes API / API routes."""

from fastapi import APIRouter

from fleetcheck.api import (
    app_settings,
    audit,
    checklist_templates,
    checklists,
    vehicle_types,
    vehicles,
)

api_router = APIRouter(prefix="/api")

api_router.include_router(checklists.router, prefix="/checklists", tags=["checklists"])
api_router.include_router(checklist_templates.router, prefix="/checklist-templates", tags=["checklist-templates"])
api_router.include_router(vehicle_types.router, prefix="/vehicle-types", tags=["vehicle-types"])
api_router.include_router(vehicles.router, prefix="/vehicles", tags=["vehicles"])
api_router.include_router(app_settings.router, prefix="/settings", tags=["settings"])
api_router.include_router(audit.router, prefix="/audit", tags=["audit"])
