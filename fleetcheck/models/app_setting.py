"""Modele Parametre applicatif / Application setting model (JSON values)."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from fleetcheck.database import Base


class AppSetting(Base):
    __tablename__ = "app_settings"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)  # JSON
    updated_at: Mapped[str | None] = mapped_column(String(32))

    def __repr__(self) -> str:
        return f"<AppSetting {self.key}>"
