"""Routes Parametres applicatifs / Application setting API routes.

Valeurs JSON par cle (ex. obs_config, la configuration checklist legacy).
JSON values by key (e.g. obs_config, the legacy checklist configuration).
"""

import json
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetcheck.api.deps import get_legacy_settings
from fleetcheck.config import settings
from fleetcheck.database import get_db
from fleetcheck.models.app_setting import AppSetting
from fleetcheck.services.legacy_settings import LegacySettingsProvider

router = APIRouter()


@router.get("/{key}")
async def get_setting(key: str, db: AsyncSession = Depends(get_db)):
    """Valeur JSON d'un parametre / JSON value of a setting."""
    result = await db.execute(select(AppSetting).where(AppSetting.key == key))
    setting = result.scalar_one_or_none()
    if not setting:
        raise HTTPException(status_code=404, detail="Setting not found")
    try:
        return json.loads(setting.value)
    except ValueError:
        raise HTTPException(status_code=500, detail=f"Setting '{key}' holds invalid JSON")


@router.put("/{key}")
async def put_setting(
    key: str,
    value: Any = Body(...),
    db: AsyncSession = Depends(get_db),
    legacy_settings: LegacySettingsProvider = Depends(get_legacy_settings),
):
    """Creer ou remplacer un parametre / Create or replace a setting."""
    now = datetime.now(timezone.utc).isoformat(timespec="seconds")
    result = await db.execute(select(AppSetting).where(AppSetting.key == key))
    setting = result.scalar_one_or_none()
    if setting is None:
        setting = AppSetting(key=key, value=json.dumps(value, ensure_ascii=False), updated_at=now)
        db.add(setting)
    else:
        setting.value = json.dumps(value, ensure_ascii=False)
        setting.updated_at = now
    await db.commit()

    if key == settings.LEGACY_SETTINGS_KEY:
        legacy_settings.invalidate()
    return value
