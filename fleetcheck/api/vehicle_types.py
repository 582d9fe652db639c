"""Routes Types de vehicule / Vehicle type API routes."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fleetcheck.database import get_db
from fleetcheck.models.checklist_template import ChecklistTemplate
from fleetcheck.models.vehicle import Vehicle
from fleetcheck.models.vehicle_type import VehicleType
from fleetcheck.schemas.vehicle import VehicleTypeCreate, VehicleTypeRead, VehicleTypeUpdate

router = APIRouter()


async def _check_template(db: AsyncSession, template_id: int | None) -> None:
    if template_id is not None and not await db.get(ChecklistTemplate, template_id):
        raise HTTPException(status_code=404, detail="Checklist template not found")


@router.get("/", response_model=list[VehicleTypeRead])
async def list_vehicle_types(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(VehicleType).order_by(VehicleType.name))
    return result.scalars().all()


@router.get("/{vehicle_type_id}", response_model=VehicleTypeRead)
async def get_vehicle_type(vehicle_type_id: int, db: AsyncSession = Depends(get_db)):
    vtype = await db.get(VehicleType, vehicle_type_id)
    if not vtype:
        raise HTTPException(status_code=404, detail="Vehicle type not found")
    return vtype


@router.post("/", response_model=VehicleTypeRead, status_code=201)
async def create_vehicle_type(data: VehicleTypeCreate, db: AsyncSession = Depends(get_db)):
    """Creer un type de vehicule / Create a vehicle type."""
    await _check_template(db, data.checklist_template_id)
    vtype = VehicleType(**data.model_dump())
    db.add(vtype)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail=f"Le type '{data.name}' existe deja")
    await db.refresh(vtype)
    return vtype


@router.put("/{vehicle_type_id}", response_model=VehicleTypeRead)
async def update_vehicle_type(vehicle_type_id: int, data: VehicleTypeUpdate, db: AsyncSession = Depends(get_db)):
    """Modifier un type de vehicule / Update a vehicle type.

    checklistTemplateId a null remet le type sur les items legacy.
    Setting checklistTemplateId to null puts the type back on legacy items.
    """
    vtype = await db.get(VehicleType, vehicle_type_id)
    if not vtype:
        raise HTTPException(status_code=404, detail="Vehicle type not found")
    updates = data.model_dump(exclude_unset=True)
    await _check_template(db, updates.get("checklist_template_id"))
    for key, value in updates.items():
        setattr(vtype, key, value)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail=f"Le type '{data.name}' existe deja")
    await db.refresh(vtype)
    return vtype


@router.delete("/{vehicle_type_id}", status_code=204)
async def delete_vehicle_type(vehicle_type_id: int, db: AsyncSession = Depends(get_db)):
    vtype = await db.get(VehicleType, vehicle_type_id)
    if not vtype:
        raise HTTPException(status_code=404, detail="Vehicle type not found")
    in_use = await db.scalar(select(func.count(Vehicle.id)).where(Vehicle.vehicle_type_id == vehicle_type_id))
    if in_use:
        raise HTTPException(status_code=409, detail=f"Vehicle type is used by {in_use} vehicle(s)")
    await db.delete(vtype)
