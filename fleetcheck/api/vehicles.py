"""Routes Vehicules / Vehicle API routes."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fleetcheck.api.deps import get_checklist_service, get_view_cache
from fleetcheck.database import get_db
from fleetcheck.models.vehicle import Vehicle, VehicleStatus
from fleetcheck.models.vehicle_checklist import VehicleChecklist
from fleetcheck.models.vehicle_type import VehicleType
from fleetcheck.schemas.vehicle import VehicleCreate, VehicleMileageRead, VehicleRead, VehicleUpdate
from fleetcheck.services.checklist_service import ChecklistService
from fleetcheck.services.view_cache import ViewCache, vehicle_mileage_key

router = APIRouter()


async def _check_vehicle_type(db: AsyncSession, vehicle_type_id: int | None) -> None:
    if vehicle_type_id is not None and not await db.get(VehicleType, vehicle_type_id):
        raise HTTPException(status_code=404, detail="Vehicle type not found")


@router.get("/", response_model=list[VehicleRead])
async def list_vehicles(
    status: str | None = None,
    vehicle_type_id: int | None = None,
    db: AsyncSession = Depends(get_db),
):
    """Lister les vehicules / List vehicles."""
    query = select(Vehicle).order_by(Vehicle.plate)
    if status is not None:
        query = query.where(Vehicle.status == VehicleStatus(status))
    if vehicle_type_id is not None:
        query = query.where(Vehicle.vehicle_type_id == vehicle_type_id)
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/{vehicle_id}", response_model=VehicleRead)
async def get_vehicle(vehicle_id: int, db: AsyncSession = Depends(get_db)):
    """Voir un vehicule / Get vehicle detail."""
    vehicle = await db.get(Vehicle, vehicle_id)
    if not vehicle:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    return vehicle


@router.get("/{vehicle_id}/mileage", response_model=VehicleMileageRead)
async def get_vehicle_mileage(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
    service: ChecklistService = Depends(get_checklist_service),
):
    """Kilometrage courant (vue en cache) / Current mileage (cached view)."""
    return await service.vehicle_mileage(db, vehicle_id)


@router.post("/", response_model=VehicleRead, status_code=201)
async def create_vehicle(data: VehicleCreate, db: AsyncSession = Depends(get_db)):
    """Creer un vehicule / Create vehicle."""
    await _check_vehicle_type(db, data.vehicle_type_id)
    dump = data.model_dump()
    now = datetime.now(timezone.utc).isoformat(timespec="seconds")
    dump["last_km_update"] = now if dump.get("mileage") else None
    vehicle = Vehicle(**dump)
    db.add(vehicle)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail=f"La plaque '{data.plate}' existe deja")
    await db.refresh(vehicle)
    return vehicle


@router.put("/{vehicle_id}", response_model=VehicleRead)
async def update_vehicle(
    vehicle_id: int,
    data: VehicleUpdate,
    db: AsyncSession = Depends(get_db),
    view_cache: ViewCache = Depends(get_view_cache),
):
    """Modifier un vehicule / Update vehicle."""
    vehicle = await db.get(Vehicle, vehicle_id)
    if not vehicle:
        raise HTTPException(status_code=404, detail="Vehicle not found")

    updates = data.model_dump(exclude_unset=True)
    if "vehicle_type_id" in updates:
        await _check_vehicle_type(db, updates["vehicle_type_id"])

    # Si km change, maj last_km_update / If km changes, update timestamp
    if "mileage" in updates and updates["mileage"] is not None:
        updates["last_km_update"] = datetime.now(timezone.utc).isoformat(timespec="seconds")

    for key, value in updates.items():
        setattr(vehicle, key, value)

    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail=f"La plaque '{data.plate}' existe deja")
    await db.commit()
    await db.refresh(vehicle)
    view_cache.invalidate(vehicle_mileage_key(vehicle_id))
    return vehicle


@router.delete("/{vehicle_id}", status_code=204)
async def delete_vehicle(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
    view_cache: ViewCache = Depends(get_view_cache),
):
    """Supprimer un vehicule sans historique / Delete a vehicle with no checklist history."""
    vehicle = await db.get(Vehicle, vehicle_id)
    if not vehicle:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    history = await db.scalar(
        select(func.count(VehicleChecklist.id)).where(VehicleChecklist.vehicle_id == vehicle_id)
    )
    if history:
        raise HTTPException(status_code=409, detail=f"Vehicle has {history} checklist(s)")
    await db.delete(vehicle)
    await db.commit()
    view_cache.invalidate(vehicle_mileage_key(vehicle_id))
