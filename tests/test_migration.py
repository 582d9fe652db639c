"""Tests migration legacy -> template / Legacy to template migration tests."""

import json

import pytest
from sqlalchemy import select

from conftest import set_obs_config
from fleetcheck.models.app_setting import AppSetting
from fleetcheck.models.audit import AuditLog
from fleetcheck.models.checklist_template import ChecklistTemplateItem
from scripts.migrate_legacy_checklists import MIGRATED_GROUP, migrate_legacy_checklists


@pytest.mark.asyncio
async def test_migrates_obs_config_into_template(db):
    await set_obs_config(db, [
        {"key": "lataria", "label": "Lataria", "group": "inspecao_veiculo", "defaultChecked": True},
        {"label": "Sem chave"},
    ])

    template_id = await migrate_legacy_checklists(db, "obs_config")
    assert template_id is not None

    items = (await db.execute(
        select(ChecklistTemplateItem)
        .where(ChecklistTemplateItem.checklist_template_id == template_id)
        .order_by(ChecklistTemplateItem.order)
    )).scalars().all()
    assert [(i.key, i.label, i.order) for i in items] == [("lataria", "Lataria", 1), ("legacy_item_2", "Sem chave", 2)]
    assert {i.group for i in items} == {MIGRATED_GROUP}
    assert items[0].default_checked is True

    keys = (await db.execute(select(AppSetting.key))).scalars().all()
    assert len(keys) == 1 and keys[0].startswith("obs_config_migrated_")

    audit = await db.scalar(select(AuditLog).where(AuditLog.action == "MIGRATE"))
    assert json.loads(audit.changes)["new"] == {"template_id": template_id, "item_count": 2}


@pytest.mark.asyncio
async def test_migration_skips_without_config(db):
    assert await migrate_legacy_checklists(db, "obs_config") is None


@pytest.mark.asyncio
async def test_migration_runs_once(db):
    await set_obs_config(db, [{"key": "pneus", "label": "Pneus"}])
    assert await migrate_legacy_checklists(db, "obs_config") is not None
    await set_obs_config(db, [{"key": "pneus", "label": "Pneus"}])
    assert await migrate_legacy_checklists(db, "obs_config") is None
