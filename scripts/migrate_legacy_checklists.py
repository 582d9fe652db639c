"""
Migration checklist legacy -> template / Legacy checklist to template migration.

Convertit la configuration "obs_config" en template "Padrão (Migrado)",
puis renomme la cle en obs_config_migrated_<epoch>, en une transaction.
Turns the "obs_config" configuration into the "Padrão (Migrado)"
template, then renames the key to obs_config_migrated_<epoch>, in one
transaction.

Usage:
    DATABASE_URL=sqlite+aiosqlite:///./fleetcheck.db \
    python -m scripts.migrate_legacy_checklists
"""

import asyncio
import json
import logging
import os
import sys
import time
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

# Rendre le package fleetcheck importable / Make fleetcheck package importable
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fleetcheck.config import settings
from fleetcheck.database import async_session, init_db
from fleetcheck.models.app_setting import AppSetting
from fleetcheck.models.audit import AuditLog
from fleetcheck.models.checklist_template import ChecklistTemplate, ChecklistTemplateItem

logger = logging.getLogger("fleetcheck.migrate")

MIGRATED_TEMPLATE_NAME = "Padrão (Migrado)"
MIGRATED_GROUP = "Geral"


async def migrate_legacy_checklists(session: AsyncSession, key: str = settings.LEGACY_SETTINGS_KEY) -> int | None:
    """Migrer la configuration legacy / Migrate the legacy configuration.

    Retourne l'id du template cree, ou None si rien n'a ete migre.
    Returns the created template id, or None when nothing was migrated.
    """
    setting = await session.scalar(select(AppSetting).where(AppSetting.key == key))
    if setting is None:
        logger.info("No legacy configuration found (%s), skipping", key)
        return None

    try:
        descriptors = json.loads(setting.value)
    except ValueError:
        logger.error("Legacy configuration %s is not valid JSON", key)
        raise

    if not isinstance(descriptors, list) or not descriptors:
        logger.info("Legacy configuration is empty or not a list, skipping")
        return None

    existing = await session.scalar(
        select(ChecklistTemplate.id).where(ChecklistTemplate.name == MIGRATED_TEMPLATE_NAME)
    )
    if existing is not None:
        logger.info("Template '%s' already exists (id %s), skipping", MIGRATED_TEMPLATE_NAME, existing)
        return None

    now = datetime.now(timezone.utc).isoformat(timespec="seconds")
    template = ChecklistTemplate(
        name=MIGRATED_TEMPLATE_NAME,
        description=f"Template migrado automaticamente das configurações globais ({key})",
        active=True,
        created_at=now,
    )
    session.add(template)
    await session.flush()

    for order, raw in enumerate(descriptors, 1):
        raw = raw if isinstance(raw, dict) else {}
        session.add(ChecklistTemplateItem(
            checklist_template_id=template.id,
            key=raw.get("key") or f"legacy_item_{order}",
            label=raw.get("label") or "Item sem nome",
            group=MIGRATED_GROUP,
            column=1,
            order=order,
            default_checked=bool(raw.get("defaultChecked")),
            criticality=0,
            active=True,
        ))

    session.add(AuditLog(
        entity_type="checklist_template",
        entity_id=template.id,
        action="MIGRATE",
        changes=json.dumps({
            "old": descriptors,
            "new": {"template_id": template.id, "item_count": len(descriptors)},
        }, ensure_ascii=False),
        description="Migração automática de checklist legado",
        timestamp=now,
    ))

    setting.key = f"{key}_migrated_{int(time.time())}"
    setting.updated_at = now
    await session.commit()
    logger.info("Migrated %d legacy items into template %s", len(descriptors), template.id)
    return template.id


async def main():
    logging.basicConfig(level=logging.INFO, format="[migrate] %(message)s")
    await init_db()
    async with async_session() as session:
        try:
            await migrate_legacy_checklists(session)
        except Exception:
            await session.rollback()
            raise


if __name__ == "__main__":
    asyncio.run(main())
