"""Modele template de checklist / Checklist template model (configurable item set)."""

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fleetcheck.database import Base


class ChecklistTemplate(Base):
    """Ensemble ordonne d'items d'inspection / Named ordered set of inspection items."""
    __tablename__ = "checklist_templates"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[str | None] = mapped_column(String(32))  # ISO 8601

    # Relations
    items: Mapped[list["ChecklistTemplateItem"]] = relationship(
        back_populates="template",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ChecklistTemplateItem.order",
    )

    def __repr__(self) -> str:
        return f"<ChecklistTemplate {self.id}: {self.name}>"


class ChecklistTemplateItem(Base):
    """Item d'un template / Template item."""
    __tablename__ = "checklist_template_items"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    checklist_template_id: Mapped[int] = mapped_column(
        ForeignKey("checklist_templates.id", ondelete="CASCADE"), nullable=False
    )
    # Cle d'origine (migration legacy) / Original key (legacy migration)
    key: Mapped[str | None] = mapped_column(String(100))
    label: Mapped[str] = mapped_column(String(150), nullable=False)
    group: Mapped[str] = mapped_column(String(50), nullable=False)
    column: Mapped[int] = mapped_column(Integer, default=1)  # 1 ou 2
    order: Mapped[int] = mapped_column(Integer, default=0)
    default_checked: Mapped[bool] = mapped_column(Boolean, default=False)
    criticality: Mapped[int] = mapped_column(Integer, default=0)  # 0 bas, 1 moyen, 2 haut
    active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Relations
    template: Mapped["ChecklistTemplate"] = relationship(back_populates="items")

    def __repr__(self) -> str:
        return f"<ChecklistTemplateItem {self.id}: {self.label}>"
