"""Modele Type de vehicule / Vehicle type model."""

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fleetcheck.database import Base


class VehicleType(Base):
    """Categorie de vehicule / Vehicle category.

    Sans template = items legacy par defaut / No template = default legacy items.
    """
    __tablename__ = "vehicle_types"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    active: Mapped[bool] = mapped_column(Boolean, default=True)
    checklist_template_id: Mapped[int | None] = mapped_column(ForeignKey("checklist_templates.id"))

    # Relations
    vehicles: Mapped[list["Vehicle"]] = relationship(back_populates="vehicle_type", passive_deletes=True)
    checklist_template: Mapped["ChecklistTemplate | None"] = relationship()

    def __repr__(self) -> str:
        return f"<VehicleType {self.name}>"
