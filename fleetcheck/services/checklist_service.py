"""Cycle de vie des checklists / Checklist lifecycle.

Sortie (ouvert) -> retour (ferme), une seule fois. Un seul checklist ouvert
par vehicule, garanti par l'index unique partiel de vehicle_checklists.
Exit (open) -> return (closed), exactly once. At most one open checklist
per vehicle, enforced by the partial unique index on vehicle_checklists.
"""

import json
import logging
import math
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fleetcheck.models.audit import AuditLog
from fleetcheck.models.vehicle import Vehicle, VehicleStatus
from fleetcheck.models.vehicle_checklist import ChecklistStatus, VehicleChecklist
from fleetcheck.services.errors import ChecklistValidationError, ConflictError, NotFoundError
from fleetcheck.services.template_resolver import TemplateResolver, required_keys
from fleetcheck.services.value_normalizer import InspectionValue, normalize_value, parse_inspection
from fleetcheck.services.view_cache import OPEN_CHECKLISTS_KEY, ViewCache, vehicle_mileage_key
from fleetcheck.utils.checklist_constants import FUEL_LEVELS

logger = logging.getLogger(__name__)

AUDIT_ENTITY = "vehicle_checklist"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _to_iso(value: datetime | str) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _check_km(value: Any, field: str) -> float:
    """Kilometrage numerique et positif / Numeric, non-negative mileage."""
    if isinstance(value, bool):
        raise ChecklistValidationError(f"{field} must be a number")
    try:
        km = float(value)
    except (TypeError, ValueError):
        raise ChecklistValidationError(f"{field} must be a number")
    if not math.isfinite(km) or km < 0:
        raise ChecklistValidationError(f"{field} must be a non-negative number")
    return km


def _check_fuel_level(level: str, field: str) -> str:
    if level not in FUEL_LEVELS:
        raise ChecklistValidationError(f"{field} '{level}' is not a valid fuel level")
    return level


def _serialize_inspection(raw: dict | str | None, field: str) -> str:
    """Mapping objet ou texte JSON -> texte JSON / Object or JSON text -> JSON text."""
    if raw is None:
        return "{}"
    if isinstance(raw, str):
        try:
            raw = json.loads(raw) if raw.strip() else {}
        except ValueError:
            raise ChecklistValidationError(f"{field} is not valid JSON")
    if not isinstance(raw, dict):
        raise ChecklistValidationError(f"{field} must be a JSON object")
    return json.dumps(raw, ensure_ascii=False)


def _log_audit(
    db: AsyncSession,
    entity_id: int,
    action: str,
    changes: dict | None = None,
    description: str | None = None,
) -> None:
    """Enregistrer une action dans l'historique / Log an action to audit_logs."""
    db.add(AuditLog(
        entity_type=AUDIT_ENTITY,
        entity_id=entity_id,
        action=action,
        changes=json.dumps(changes, ensure_ascii=False) if changes else None,
        description=description,
        timestamp=_now_iso(),
    ))


class ChecklistService:
    """Operations de sortie/retour/suppression / Exit, return and delete operations.

    Chaque operation reussie est commitee en une fois puis invalide les vues
    derivees (checklists ouverts, kilometrage du vehicule).
    Each successful operation is committed once, then invalidates the
    derived views (open checklists, vehicle mileage).
    """

    def __init__(self, resolver: TemplateResolver, view_cache: ViewCache):
        self.resolver = resolver
        self.view_cache = view_cache

    # --- Lecture / Read ---

    async def get(self, db: AsyncSession, checklist_id: int) -> VehicleChecklist:
        checklist = await db.get(VehicleChecklist, checklist_id)
        if checklist is None:
            raise NotFoundError(f"Checklist {checklist_id} not found")
        return checklist

    async def list_by_status(self, db: AsyncSession, status: ChecklistStatus) -> list[VehicleChecklist]:
        result = await db.execute(
            select(VehicleChecklist)
            .where(VehicleChecklist.status == status)
            .order_by(VehicleChecklist.start_date.desc(), VehicleChecklist.id.desc())
        )
        return list(result.scalars().all())

    async def open_checklists(self, db: AsyncSession) -> list[dict]:
        """Vue en cache des checklists ouverts / Cached open-checklists view."""

        async def _load() -> list[dict]:
            rows = await self.list_by_status(db, ChecklistStatus.OPEN)
            return [checklist_to_dict(c) for c in rows]

        return await self.view_cache.get_or_load(OPEN_CHECKLISTS_KEY, _load)

    async def vehicle_mileage(self, db: AsyncSession, vehicle_id: int) -> dict:
        """Vue en cache du kilometrage / Cached vehicle mileage view."""

        async def _load() -> dict:
            vehicle = await db.get(Vehicle, vehicle_id)
            if vehicle is None:
                raise NotFoundError(f"Vehicle {vehicle_id} not found")
            return {
                "vehicle_id": vehicle.id,
                "mileage": vehicle.mileage or 0.0,
                "last_km_update": vehicle.last_km_update,
            }

        return await self.view_cache.get_or_load(vehicle_mileage_key(vehicle_id), _load)

    # --- Sortie / Exit ---

    async def exit(
        self,
        db: AsyncSession,
        vehicle_id: int,
        user_id: int,
        km_initial: Any,
        fuel_level_start: str,
        start_date: datetime | str,
        inspection_start: dict | str | None,
    ) -> VehicleChecklist:
        """Ouvrir un checklist de sortie / Open an exit checklist."""
        km = _check_km(km_initial, "kmInitial")
        _check_fuel_level(fuel_level_start, "fuelLevelStart")
        payload = _serialize_inspection(inspection_start, "inspectionStart")

        vehicle = await db.get(Vehicle, vehicle_id)
        if vehicle is None:
            raise NotFoundError(f"Vehicle {vehicle_id} not found")
        if vehicle.status != VehicleStatus.ACTIVE:
            raise ChecklistValidationError(f"Vehicle {vehicle.plate} is inactive")

        existing = await db.scalar(
            select(VehicleChecklist.id).where(
                VehicleChecklist.vehicle_id == vehicle_id,
                VehicleChecklist.status == ChecklistStatus.OPEN,
            )
        )
        if existing is not None:
            raise ConflictError(f"Vehicle {vehicle.plate} already has an open checklist ({existing})")

        # Template fige a la creation / Template frozen at creation time
        template_id = await self.resolver.template_for_vehicle(db, vehicle_id)

        checklist = VehicleChecklist(
            vehicle_id=vehicle_id,
            user_id=user_id,
            checklist_template_id=template_id,
            status=ChecklistStatus.OPEN,
            km_initial=km,
            fuel_level_start=fuel_level_start,
            start_date=_to_iso(start_date),
            inspection_start=payload,
            created_at=_now_iso(),
        )
        db.add(checklist)
        try:
            # L'index unique partiel tranche les sorties concurrentes
            # The partial unique index settles concurrent exits
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError(f"Vehicle {vehicle_id} already has an open checklist")

        if km > (vehicle.mileage or 0.0):
            vehicle.mileage = km
            vehicle.last_km_update = _now_iso()

        _log_audit(db, checklist.id, "EXIT", {
            "vehicle_id": vehicle_id,
            "user_id": user_id,
            "km_initial": km,
            "fuel_level_start": fuel_level_start,
            "checklist_template_id": template_id,
        })
        await db.commit()
        self.view_cache.invalidate_checklist_views(vehicle_id)
        logger.info("Checklist %s opened for vehicle %s (km %.1f)", checklist.id, vehicle_id, km)
        return checklist

    # --- Retour / Return ---

    async def return_(
        self,
        db: AsyncSession,
        checklist_id: int,
        km_final: Any,
        fuel_level_end: str,
        end_date: datetime | str,
        inspection_end: dict | str | None,
    ) -> VehicleChecklist:
        """Fermer un checklist ouvert / Close an open checklist.

        Toutes les validations precedent l'unique UPDATE conditionnel : en cas
        d'echec le checklist reste ouvert et intact.
        All validation runs before the single conditional UPDATE: on failure
        the checklist stays open and untouched.
        """
        checklist = await self.get(db, checklist_id)
        if checklist.status != ChecklistStatus.OPEN:
            raise ConflictError(f"Checklist {checklist_id} is already closed")

        km = _check_km(km_final, "kmFinal")
        if km < checklist.km_initial:
            raise ChecklistValidationError(
                f"kmFinal ({km:g}) must be greater than or equal to kmInitial ({checklist.km_initial:g})"
            )
        _check_fuel_level(fuel_level_end, "fuelLevelEnd")
        payload = _serialize_inspection(inspection_end, "inspectionEnd")

        resolution = await self.resolver.resolve(db, checklist)
        values = parse_inspection(payload)
        missing = [
            key for key in required_keys(resolution)
            if normalize_value(values.get(key)) is InspectionValue.UNSET
        ]
        if missing:
            raise ChecklistValidationError(f"Missing inspection items: {', '.join(missing)}")

        end_iso = _to_iso(end_date)
        result = await db.execute(
            update(VehicleChecklist)
            .where(VehicleChecklist.id == checklist_id, VehicleChecklist.status == ChecklistStatus.OPEN)
            .values(
                status=ChecklistStatus.CLOSED,
                km_final=km,
                fuel_level_end=fuel_level_end,
                end_date=end_iso,
                inspection_end=payload,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await db.rollback()
            raise ConflictError(f"Checklist {checklist_id} was closed concurrently")

        vehicle = await db.get(Vehicle, checklist.vehicle_id)
        if vehicle is not None and km > (vehicle.mileage or 0.0):
            vehicle.mileage = km
            vehicle.last_km_update = _now_iso()

        _log_audit(db, checklist_id, "RETURN", {
            "km_initial": checklist.km_initial,
            "km_final": km,
            "fuel_level_end": fuel_level_end,
            "source": resolution.source,
        })
        await db.commit()
        await db.refresh(checklist)
        self.view_cache.invalidate_checklist_views(checklist.vehicle_id)
        logger.info(
            "Checklist %s closed for vehicle %s (%.1f km)",
            checklist_id, checklist.vehicle_id, km - checklist.km_initial,
        )
        return checklist

    # --- Suppression / Delete ---

    async def delete(self, db: AsyncSession, checklist_id: int) -> None:
        """Suppression administrative / Administrative deletion."""
        checklist = await self.get(db, checklist_id)
        vehicle_id = checklist.vehicle_id
        _log_audit(db, checklist_id, "DELETE", {
            "vehicle_id": vehicle_id,
            "status": checklist.status.value,
        })
        await db.delete(checklist)
        await db.commit()
        self.view_cache.invalidate_checklist_views(vehicle_id)
        logger.info("Checklist %s deleted (vehicle %s)", checklist_id, vehicle_id)


def checklist_to_dict(checklist: VehicleChecklist) -> dict:
    """Representation JSON du checklist / JSON-ready checklist."""
    return {
        "id": checklist.id,
        "vehicleId": checklist.vehicle_id,
        "userId": checklist.user_id,
        "checklistTemplateId": checklist.checklist_template_id,
        "status": checklist.status.value,
        "kmInitial": checklist.km_initial,
        "fuelLevelStart": checklist.fuel_level_start,
        "startDate": checklist.start_date,
        "inspectionStart": checklist.inspection_start,
        "kmFinal": checklist.km_final,
        "fuelLevelEnd": checklist.fuel_level_end,
        "endDate": checklist.end_date,
        "inspectionEnd": checklist.inspection_end,
        "createdAt": checklist.created_at,
    }
