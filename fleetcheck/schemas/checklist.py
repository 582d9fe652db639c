"""Schemas checklist vehicule / Vehicle checklist schemas."""

from datetime import datetime
from typing import Any

from fleetcheck.models.vehicle_checklist import ChecklistStatus
from fleetcheck.schemas.common import CamelModel


# --- Sortie / Retour (entree) / Exit / Return (input) ---

class ChecklistExitRequest(CamelModel):
    """Sortie du vehicule / Vehicle exit."""
    vehicle_id: int
    user_id: int
    km_initial: float
    fuel_level_start: str
    start_date: datetime
    inspection_start: dict[str, Any] | str | None = None


class ChecklistReturnRequest(CamelModel):
    """Retour du vehicule / Vehicle return."""
    km_final: float
    fuel_level_end: str
    end_date: datetime
    inspection_end: dict[str, Any] | str | None = None


# --- Lecture / Read ---

class ChecklistRead(CamelModel):
    id: int
    vehicle_id: int
    user_id: int
    checklist_template_id: int | None = None
    status: ChecklistStatus
    km_initial: float
    fuel_level_start: str
    start_date: str
    inspection_start: str | None = None
    km_final: float | None = None
    fuel_level_end: str | None = None
    end_date: str | None = None
    inspection_end: str | None = None
    created_at: str | None = None


class ChecklistReportRead(ChecklistRead):
    non_compliant: bool = False


class ResolvedItemRead(CamelModel):
    key: str
    label: str
    group: str
    column: int
    order: int
    default_checked: bool


class ResolvedGroupRead(CamelModel):
    key: str
    label: str


class ChecklistItemsRead(CamelModel):
    """Items et groupes resolus pour un checklist / Resolved items and groups for a checklist."""
    source: str  # template, legacy
    template_id: int | None = None
    items: list[ResolvedItemRead]
    groups: list[ResolvedGroupRead]


# --- Statistiques / Statistics ---

class VehicleStatsRead(CamelModel):
    vehicle_id: int
    plate: str
    model: str
    total_checklists: int
    total_km: float
    avg_km_per_trip: float
    checklists: list[ChecklistReportRead] = []


class DailyCount(CamelModel):
    date: str
    count: int


class ChecklistAnalyticsRead(CamelModel):
    completeness_rate: float
    open_count: int
    closed_count: int
    avg_km_per_trip: float
    active_vehicles_with_open: int
    daily_trend: list[DailyCount] = []
