"""Configuration legacy distante / Remote legacy checklist configuration.

Charge la liste d'items "obs_config" (table app_settings ou URL HTTP),
avec timeout borne, cache TTL et invalidation explicite. Ne leve jamais :
toute panne retombe sur la liste integree.
Loads the "obs_config" item list (app_settings table or HTTP URL) with a
bounded timeout, TTL cache and explicit invalidation. Never raises: any
failure falls back to the built-in list.
"""

import asyncio
import json
import logging
import time
from typing import Any, Awaitable, Callable

import httpx
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fleetcheck.models.app_setting import AppSetting
from fleetcheck.services.template_resolver import ResolvedItem, builtin_legacy_items

logger = logging.getLogger(__name__)

DEFAULT_GROUP = "Geral"

Loader = Callable[[], Awaitable[Any]]


def coerce_descriptors(data: Any) -> list[ResolvedItem]:
    """Convertir les descripteurs bruts / Convert raw descriptors.

    Les entrees sans cle texte sont ignorees. Liste vide si rien d'exploitable.
    Entries without a text key are skipped. Empty list when nothing usable.
    """
    if not isinstance(data, list):
        return []
    items = []
    for index, raw in enumerate(data, 1):
        if not isinstance(raw, dict):
            continue
        key = raw.get("key")
        if not isinstance(key, str) or not key.strip():
            continue
        label = raw.get("label")
        group = raw.get("group")
        column = raw.get("column")
        order = raw.get("order")
        items.append(ResolvedItem(
            key=key,
            label=label if isinstance(label, str) and label else key,
            group=group if isinstance(group, str) and group else DEFAULT_GROUP,
            column=column if column in (1, 2) else 1,
            order=order if isinstance(order, int) and not isinstance(order, bool) else index,
            default_checked=raw.get("defaultChecked", raw.get("default_checked")) is True,
        ))
    return items


def db_loader(session_factory: async_sessionmaker[AsyncSession], key: str) -> Loader:
    """Lire la valeur JSON dans app_settings / Read the JSON value from app_settings."""

    async def _load() -> Any:
        async with session_factory() as session:
            result = await session.execute(select(AppSetting.value).where(AppSetting.key == key))
            value = result.scalar_one_or_none()
        if value is None:
            return None
        return json.loads(value)

    return _load


def http_loader(url: str, timeout_seconds: float) -> Loader:
    """GET JSON sur une URL de configuration / GET JSON from a settings URL."""

    async def _load() -> Any:
        async with httpx.AsyncClient(timeout=timeout_seconds) as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.json()

    return _load


class LegacySettingsProvider:
    """Lecture avec cache de la configuration legacy / Cached read-through of legacy settings."""

    def __init__(
        self,
        loader: Loader,
        ttl_seconds: float = 300.0,
        timeout_seconds: float = 2.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._loader = loader
        self.ttl_seconds = ttl_seconds
        self.timeout_seconds = timeout_seconds
        self._clock = clock
        self._cached: list[ResolvedItem] | None = None
        self._expires_at = 0.0

    async def get_items(self) -> list[ResolvedItem]:
        if self._cached is not None and self._clock() < self._expires_at:
            return list(self._cached)
        items = await self._fetch()
        self._cached = items
        self._expires_at = self._clock() + self.ttl_seconds
        return list(items)

    async def _fetch(self) -> list[ResolvedItem]:
        try:
            data = await asyncio.wait_for(self._loader(), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning("Legacy settings fetch timed out after %.1fs, using built-in items", self.timeout_seconds)
            return builtin_legacy_items()
        except Exception as exc:
            logger.warning("Legacy settings unavailable (%s), using built-in items", exc)
            return builtin_legacy_items()

        items = coerce_descriptors(data)
        if not items:
            logger.info("Legacy settings empty or malformed, using built-in items")
            return builtin_legacy_items()
        return items

    def invalidate(self) -> None:
        self._cached = None
        self._expires_at = 0.0
