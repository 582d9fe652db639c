"""Cache des vues derivees / Derived views cache.

Kilometrage vehicule et liste des checklists ouverts, invalides apres
chaque sortie/retour/suppression.
Vehicle mileage and open-checklists list, invalidated after every
exit/return/delete.
"""

import logging
import time
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

OPEN_CHECKLISTS_KEY = "checklists:open"
VEHICLE_MILEAGE_PREFIX = "vehicle_mileage:"


def vehicle_mileage_key(vehicle_id: int) -> str:
    return f"{VEHICLE_MILEAGE_PREFIX}{vehicle_id}"


class ViewCache:
    """Cache memoire avec TTL et invalidation explicite / In-memory TTL cache with explicit invalidation."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            self._entries.pop(key, None)
            return None
        return value

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = (self._clock() + self.ttl_seconds, value)

    async def get_or_load(self, key: str, loader: Callable[[], Awaitable[Any]]) -> Any:
        value = self.get(key)
        if value is None:
            value = await loader()
            self.set(key, value)
        return value

    def invalidate(self, *keys: str) -> None:
        for key in keys:
            self._entries.pop(key, None)
        logger.debug("View cache invalidated: %s", ", ".join(keys))

    def invalidate_checklist_views(self, vehicle_id: int) -> None:
        """Vues impactees par une sortie/retour / Views touched by an exit/return."""
        self.invalidate(OPEN_CHECKLISTS_KEY, vehicle_mileage_key(vehicle_id))
