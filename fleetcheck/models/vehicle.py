"""Modele Vehicule / Vehicle model.

Vehicule de la flotte soumis aux checklists de sortie/retour.
Fleet vehicle subject to exit/return checklists.
"""

import enum

from sqlalchemy import Enum, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fleetcheck.database import Base


class VehicleStatus(str, enum.Enum):
    """Statut operationnel / Operational status."""
    ACTIVE = "active"
    INACTIVE = "inactive"


class FuelType(str, enum.Enum):
    """Type de carburant / Fuel type."""
    GASOLINA = "gasolina"
    ETANOL = "etanol"
    DIESEL = "diesel"
    DIESEL_S10 = "diesel_s10"
    FLEX = "flex"


class Vehicle(Base):
    """Vehicule du parc / Fleet vehicle."""
    __tablename__ = "vehicles"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # --- Identification ---
    plate: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    brand: Mapped[str] = mapped_column(String(50), nullable=False)
    model: Mapped[str] = mapped_column(String(50), nullable=False)
    year: Mapped[int | None] = mapped_column(Integer)
    fuel_type: Mapped[FuelType | None] = mapped_column(
        Enum(FuelType, native_enum=False, values_callable=lambda e: [m.value for m in e])
    )

    # --- Classification ---
    status: Mapped[VehicleStatus] = mapped_column(
        Enum(VehicleStatus, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        default=VehicleStatus.ACTIVE,
    )
    vehicle_type_id: Mapped[int | None] = mapped_column(ForeignKey("vehicle_types.id"))

    # --- Kilometrage / Mileage ---
    mileage: Mapped[float] = mapped_column(Float, default=0.0)
    last_km_update: Mapped[str | None] = mapped_column(String(32))  # ISO 8601

    # --- Relations ---
    vehicle_type: Mapped["VehicleType | None"] = relationship(back_populates="vehicles")
    checklists: Mapped[list["VehicleChecklist"]] = relationship(back_populates="vehicle", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<Vehicle {self.plate} - {self.brand} {self.model}>"
