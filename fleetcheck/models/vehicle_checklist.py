"""Modele checklist vehicule / Vehicle checklist model.

Un checklist = une utilisation du vehicule : sortie (ouvert) puis retour (ferme).
A checklist = one vehicle usage session: exit (open) then return (closed).
"""

import enum

from sqlalchemy import Enum, Float, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fleetcheck.database import Base


class ChecklistStatus(str, enum.Enum):
    """Statut checklist / Checklist status."""
    OPEN = "open"
    CLOSED = "closed"


class VehicleChecklist(Base):
    """Checklist de sortie/retour / Exit/return checklist record."""
    __tablename__ = "vehicle_checklists"
    __table_args__ = (
        # Un seul checklist ouvert par vehicule / At most one open checklist per vehicle
        Index(
            "uq_vehicle_checklists_open_vehicle",
            "vehicle_id",
            unique=True,
            sqlite_where=text("status = 'open'"),
            postgresql_where=text("status = 'open'"),
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    vehicle_id: Mapped[int] = mapped_column(ForeignKey("vehicles.id"), nullable=False)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    checklist_template_id: Mapped[int | None] = mapped_column(ForeignKey("checklist_templates.id"))
    status: Mapped[ChecklistStatus] = mapped_column(
        Enum(ChecklistStatus, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        default=ChecklistStatus.OPEN,
        nullable=False,
    )

    # --- Sortie / Exit ---
    km_initial: Mapped[float] = mapped_column(Float, nullable=False)
    fuel_level_start: Mapped[str] = mapped_column(String(20), nullable=False)
    start_date: Mapped[str] = mapped_column(String(32), nullable=False)  # ISO 8601
    inspection_start: Mapped[str | None] = mapped_column(Text)  # JSON

    # --- Retour / Return ---
    km_final: Mapped[float | None] = mapped_column(Float)
    fuel_level_end: Mapped[str | None] = mapped_column(String(20))
    end_date: Mapped[str | None] = mapped_column(String(32))
    inspection_end: Mapped[str | None] = mapped_column(Text)  # JSON

    created_at: Mapped[str | None] = mapped_column(String(32))

    # Relations
    vehicle: Mapped["Vehicle"] = relationship(back_populates="checklists")

    def __repr__(self) -> str:
        return f"<VehicleChecklist {self.id} - {self.status.value} - vehicle {self.vehicle_id}>"
