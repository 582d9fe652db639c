"""Schémas Véhicule / Vehicle schemas."""

from pydantic import Field

from fleetcheck.models.vehicle import FuelType, VehicleStatus
from fleetcheck.schemas.common import CamelModel


class VehicleBase(CamelModel):
    plate: str = Field(min_length=1, max_length=20)
    brand: str
    model: str
    year: int | None = None
    fuel_type: FuelType | None = None
    status: VehicleStatus = VehicleStatus.ACTIVE
    vehicle_type_id: int | None = None
    mileage: float = Field(default=0.0, ge=0)


class VehicleCreate(VehicleBase):
    pass


class VehicleUpdate(CamelModel):
    plate: str | None = None
    brand: str | None = None
    model: str | None = None
    year: int | None = None
    fuel_type: FuelType | None = None
    status: VehicleStatus | None = None
    vehicle_type_id: int | None = None
    mileage: float | None = Field(default=None, ge=0)


class VehicleRead(VehicleBase):
    id: int
    last_km_update: str | None = None


class VehicleMileageRead(CamelModel):
    vehicle_id: int
    mileage: float
    last_km_update: str | None = None


# --- Types de vehicule / Vehicle types ---

class VehicleTypeBase(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = None
    active: bool = True
    checklist_template_id: int | None = None


class VehicleTypeCreate(VehicleTypeBase):
    pass


class VehicleTypeUpdate(CamelModel):
    name: str | None = None
    description: str | None = None
    active: bool | None = None
    checklist_template_id: int | None = None


class VehicleTypeRead(VehicleTypeBase):
    id: int
