"""Modèle Historique / Audit log model.

Une ligne par transition (sortie, retour, suppression, migration).
One row per transition (exit, return, delete, migration).
"""

from sqlalchemy import Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from fleetcheck.database import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("ix_audit_logs_entity", "entity_type", "entity_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)  # vehicle_checklist, checklist_template
    entity_id: Mapped[int] = mapped_column(Integer, nullable=False)
    action: Mapped[str] = mapped_column(String(20), nullable=False)  # EXIT, RETURN, DELETE, MIGRATE
    changes: Mapped[str | None] = mapped_column(Text)  # JSON
    description: Mapped[str | None] = mapped_column(String(255))
    timestamp: Mapped[str] = mapped_column(String(32), nullable=False)  # ISO 8601

    def __repr__(self) -> str:
        return f"<AuditLog {self.action} {self.entity_type}:{self.entity_id}>"
