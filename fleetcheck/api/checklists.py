"""Routes checklists vehicule / Vehicle checklist API routes."""

import io
from datetime import date

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import StreamingResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetcheck.api.deps import get_checklist_service, get_template_resolver
from fleetcheck.config import settings
from fleetcheck.database import get_db
from fleetcheck.models.vehicle import Vehicle
from fleetcheck.models.vehicle_checklist import ChecklistStatus, VehicleChecklist
from fleetcheck.rate_limit import limiter
from fleetcheck.schemas.checklist import (
    ChecklistAnalyticsRead,
    ChecklistExitRequest,
    ChecklistItemsRead,
    ChecklistRead,
    ChecklistReportRead,
    ChecklistReturnRequest,
    VehicleStatsRead,
)
from fleetcheck.services.checklist_analytics import ChecklistAnalyticsService, reference_timezone
from fleetcheck.services.checklist_service import ChecklistService
from fleetcheck.services.export_service import VEHICLE_REPORT_FIELDS, ExportService
from fleetcheck.services.template_resolver import TemplateResolver

router = APIRouter()

NO_CACHE = {"Cache-Control": "no-cache, no-store, must-revalidate"}


async def _snapshot(db: AsyncSession, date_from: date | None, date_to: date | None):
    """Checklists filtres par date + vehicules / Date-filtered checklists and vehicles."""
    checklists = (await db.execute(select(VehicleChecklist).order_by(VehicleChecklist.id))).scalars().all()
    vehicles = (await db.execute(select(Vehicle))).scalars().all()
    tz = reference_timezone(settings.REFERENCE_TIMEZONE)
    filtered = ChecklistAnalyticsService.filter_by_date(checklists, date_from, date_to, tz)
    return filtered, vehicles, tz


def _stats_to_read(stats) -> list[VehicleStatsRead]:
    return [
        VehicleStatsRead(
            vehicle_id=vs.vehicle_id,
            plate=vs.plate,
            model=vs.model,
            total_checklists=vs.total_checklists,
            total_km=vs.total_km,
            avg_km_per_trip=vs.avg_km_per_trip,
            checklists=[
                ChecklistReportRead.model_validate(c).model_copy(
                    update={"non_compliant": ChecklistAnalyticsService.is_non_compliant(c)}
                )
                for c in vs.checklists
            ],
        )
        for vs in stats
    ]


@router.get("/open", response_model=list[ChecklistRead])
async def list_open_checklists(
    db: AsyncSession = Depends(get_db),
    service: ChecklistService = Depends(get_checklist_service),
):
    """Checklists en cours (sortie sans retour) / Open checklists (exit without return)."""
    return await service.open_checklists(db)


@router.get("/closed", response_model=list[ChecklistRead])
async def list_closed_checklists(
    db: AsyncSession = Depends(get_db),
    service: ChecklistService = Depends(get_checklist_service),
):
    """Checklists termines / Closed checklists."""
    return await service.list_by_status(db, ChecklistStatus.CLOSED)


@router.post("/exit", response_model=ChecklistRead, status_code=201)
@limiter.limit(settings.RATE_LIMIT_CHECKLIST_WRITE)
async def create_exit_checklist(
    request: Request,
    data: ChecklistExitRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    service: ChecklistService = Depends(get_checklist_service),
):
    """Enregistrer la sortie d'un vehicule / Register a vehicle exit."""
    response.headers.update(NO_CACHE)
    return await service.exit(
        db,
        vehicle_id=data.vehicle_id,
        user_id=data.user_id,
        km_initial=data.km_initial,
        fuel_level_start=data.fuel_level_start,
        start_date=data.start_date,
        inspection_start=data.inspection_start,
    )


@router.post("/return/{checklist_id}", response_model=ChecklistRead)
@limiter.limit(settings.RATE_LIMIT_CHECKLIST_WRITE)
async def close_return_checklist(
    request: Request,
    checklist_id: int,
    data: ChecklistReturnRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    service: ChecklistService = Depends(get_checklist_service),
):
    """Enregistrer le retour d'un vehicule / Register a vehicle return."""
    response.headers.update(NO_CACHE)
    return await service.return_(
        db,
        checklist_id,
        km_final=data.km_final,
        fuel_level_end=data.fuel_level_end,
        end_date=data.end_date,
        inspection_end=data.inspection_end,
    )


@router.get("/stats/analytics", response_model=ChecklistAnalyticsRead)
async def checklist_analytics(
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    """Synthese de flotte / Fleet summary."""
    checklists, vehicles, tz = await _snapshot(db, date_from, date_to)
    summary = ChecklistAnalyticsService.fleet_summary(checklists, vehicles, tz)
    return ChecklistAnalyticsRead(
        completeness_rate=summary.completeness_rate,
        open_count=summary.open_count,
        closed_count=summary.closed_count,
        avg_km_per_trip=summary.avg_km_per_trip,
        active_vehicles_with_open=summary.active_vehicles_with_open,
        daily_trend=summary.daily_trend,
    )


@router.get("/stats/vehicles", response_model=list[VehicleStatsRead])
async def vehicle_statistics(
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    """Statistiques par vehicule / Per-vehicle statistics."""
    checklists, vehicles, tz = await _snapshot(db, date_from, date_to)
    return _stats_to_read(ChecklistAnalyticsService.vehicle_stats(checklists, vehicles, tz))


@router.get("/stats/vehicles/export")
async def export_vehicle_statistics(
    format: str = Query("xlsx", pattern="^(csv|xlsx)$"),
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    """Exporter les statistiques par vehicule / Export per-vehicle statistics to CSV or XLSX."""
    checklists, vehicles, tz = await _snapshot(db, date_from, date_to)
    rows = ExportService.vehicle_report_rows(ChecklistAnalyticsService.vehicle_stats(checklists, vehicles, tz))

    if format == "csv":
        content = ExportService.to_csv(rows, VEHICLE_REPORT_FIELDS)
        media_type = "text/csv; charset=utf-8"
        filename = "checklist_report.csv"
    else:
        content = ExportService.to_xlsx(rows, VEHICLE_REPORT_FIELDS, sheet_name="Checklists")
        media_type = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        filename = "checklist_report.xlsx"

    return StreamingResponse(
        io.BytesIO(content),
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{checklist_id}", response_model=ChecklistRead)
async def get_checklist(
    checklist_id: int,
    db: AsyncSession = Depends(get_db),
    service: ChecklistService = Depends(get_checklist_service),
):
    """Voir un checklist / Get checklist detail."""
    return await service.get(db, checklist_id)


@router.get("/{checklist_id}/items", response_model=ChecklistItemsRead)
async def get_checklist_items(
    checklist_id: int,
    db: AsyncSession = Depends(get_db),
    service: ChecklistService = Depends(get_checklist_service),
    resolver: TemplateResolver = Depends(get_template_resolver),
):
    """Items d'inspection applicables / Applicable inspection items and groups."""
    checklist = await service.get(db, checklist_id)
    resolution = await resolver.resolve(db, checklist)
    return ChecklistItemsRead(
        source=resolution.source,
        template_id=resolution.template_id,
        items=[item.to_dict() for item in resolution.items],
        groups=[{"key": g.key, "label": g.label} for g in resolution.groups],
    )


@router.delete("/{checklist_id}")
async def delete_checklist(
    checklist_id: int,
    response: Response,
    db: AsyncSession = Depends(get_db),
    service: ChecklistService = Depends(get_checklist_service),
):
    """Supprimer un checklist / Delete a checklist."""
    await service.delete(db, checklist_id)
    response.headers.update(NO_CACHE)
    return {"message": "Checklist deleted"}


# Pour les clients qui bloquent DELETE / For clients that block DELETE
@router.post("/{checklist_id}/delete")
async def delete_checklist_fallback(
    checklist_id: int,
    response: Response,
    db: AsyncSession = Depends(get_db),
    service: ChecklistService = Depends(get_checklist_service),
):
    """Supprimer un checklist (POST) / Delete a checklist (POST)."""
    await service.delete(db, checklist_id)
    response.headers.update(NO_CACHE)
    return {"message": "Checklist deleted"}
