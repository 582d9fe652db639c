"""Schemas historique / Audit log schemas."""

import json
from typing import Any

from pydantic import field_validator

from fleetcheck.schemas.common import CamelModel


class AuditLogRead(CamelModel):
    id: int
    entity_type: str
    entity_id: int
    action: str
    changes: dict[str, Any] | None = None
    description: str | None = None
    timestamp: str

    @field_validator("changes", mode="before")
    @classmethod
    def decode_changes(cls, value):
        # Texte JSON stocke / Stored JSON text
        if isinstance(value, str):
            try:
                decoded = json.loads(value)
            except ValueError:
                return None
            return decoded if isinstance(decoded, dict) else None
        return value


class AuditLogPage(CamelModel):
    total: int
    items: list[AuditLogRead]
