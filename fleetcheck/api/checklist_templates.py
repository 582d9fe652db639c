"""Routes templates de checklist / Checklist template API routes."""

import json
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetcheck.database import get_db
from fleetcheck.models.audit import AuditLog
from fleetcheck.models.checklist_template import ChecklistTemplate, ChecklistTemplateItem
from fleetcheck.models.vehicle_checklist import VehicleChecklist
from fleetcheck.models.vehicle_type import VehicleType
from fleetcheck.schemas.checklist_template import (
    ReorderItemsRequest,
    TemplateCreate,
    TemplateItemCreate,
    TemplateItemRead,
    TemplateItemUpdate,
    TemplateRead,
    TemplateUpdate,
)
from fleetcheck.services.errors import ChecklistValidationError, ConflictError

router = APIRouter()


async def _get_template(db: AsyncSession, template_id: int) -> ChecklistTemplate:
    template = await db.get(ChecklistTemplate, template_id)
    if not template:
        raise HTTPException(status_code=404, detail="Checklist template not found")
    return template


async def _get_item(db: AsyncSession, template_id: int, item_id: int) -> ChecklistTemplateItem:
    item = await db.get(ChecklistTemplateItem, item_id)
    if not item or item.checklist_template_id != template_id:
        raise HTTPException(status_code=404, detail="Template item not found")
    return item


async def _ensure_unreferenced(db: AsyncSession, template: ChecklistTemplate) -> None:
    """Items figes des qu'un checklist reference le template / Items frozen once a checklist references the template."""
    used_by_checklists = await db.scalar(
        select(func.count(VehicleChecklist.id)).where(VehicleChecklist.checklist_template_id == template.id)
    )
    if used_by_checklists:
        raise ConflictError(f"Template {template.name} is referenced by {used_by_checklists} checklist(s)")


async def _items_of(db: AsyncSession, template_id: int) -> list[ChecklistTemplateItem]:
    result = await db.execute(
        select(ChecklistTemplateItem)
        .where(ChecklistTemplateItem.checklist_template_id == template_id)
        .order_by(ChecklistTemplateItem.order, ChecklistTemplateItem.id)
    )
    return list(result.scalars().all())


# --- Templates ---

@router.get("/", response_model=list[TemplateRead])
async def list_templates(active: bool | None = None, db: AsyncSession = Depends(get_db)):
    """Lister les templates / List templates."""
    query = select(ChecklistTemplate).order_by(ChecklistTemplate.name)
    if active is not None:
        query = query.where(ChecklistTemplate.active == active)
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/{template_id}", response_model=TemplateRead)
async def get_template(template_id: int, db: AsyncSession = Depends(get_db)):
    return await _get_template(db, template_id)


@router.post("/", response_model=TemplateRead, status_code=201)
async def create_template(data: TemplateCreate, db: AsyncSession = Depends(get_db)):
    """Creer un template / Create a template."""
    template = ChecklistTemplate(
        **data.model_dump(),
        created_at=datetime.now(timezone.utc).isoformat(timespec="seconds"),
    )
    db.add(template)
    await db.flush()
    await db.refresh(template)
    return template


@router.patch("/{template_id}", response_model=TemplateRead)
async def update_template(template_id: int, data: TemplateUpdate, db: AsyncSession = Depends(get_db)):
    """Modifier un template / Update a template."""
    template = await _get_template(db, template_id)
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(template, key, value)
    await db.flush()
    await db.refresh(template)
    return template


@router.delete("/{template_id}", status_code=204)
async def delete_template(template_id: int, db: AsyncSession = Depends(get_db)):
    """Supprimer un template non utilise / Delete an unused template."""
    template = await _get_template(db, template_id)
    in_use = await db.scalar(
        select(func.count(VehicleType.id)).where(VehicleType.checklist_template_id == template_id)
    )
    if in_use:
        raise ConflictError(f"Template {template.name} is used by {in_use} vehicle type(s)")
    await _ensure_unreferenced(db, template)
    db.add(AuditLog(
        entity_type="checklist_template",
        entity_id=template_id,
        action="DELETE",
        changes=json.dumps({"name": template.name}, ensure_ascii=False),
        timestamp=datetime.now(timezone.utc).isoformat(timespec="seconds"),
    ))
    await db.delete(template)


# --- Items ---

@router.get("/{template_id}/items", response_model=list[TemplateItemRead])
async def list_template_items(template_id: int, db: AsyncSession = Depends(get_db)):
    """Items ordonnes du template / Ordered template items."""
    await _get_template(db, template_id)
    return await _items_of(db, template_id)


@router.post("/{template_id}/items", response_model=TemplateItemRead, status_code=201)
async def create_template_item(template_id: int, data: TemplateItemCreate, db: AsyncSession = Depends(get_db)):
    """Ajouter un item (en fin de liste par defaut) / Add an item (appended by default)."""
    await _ensure_unreferenced(db, await _get_template(db, template_id))
    dump = data.model_dump()
    if dump["order"] is None:
        last = await db.scalar(
            select(func.max(ChecklistTemplateItem.order))
            .where(ChecklistTemplateItem.checklist_template_id == template_id)
        )
        dump["order"] = (last or 0) + 1
    item = ChecklistTemplateItem(checklist_template_id=template_id, **dump)
    db.add(item)
    await db.flush()
    await db.refresh(item)
    return item


@router.patch("/{template_id}/items/{item_id}", response_model=TemplateItemRead)
async def update_template_item(
    template_id: int, item_id: int, data: TemplateItemUpdate, db: AsyncSession = Depends(get_db),
):
    item = await _get_item(db, template_id, item_id)
    await _ensure_unreferenced(db, await _get_template(db, template_id))
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(item, key, value)
    await db.flush()
    await db.refresh(item)
    return item


@router.delete("/{template_id}/items/{item_id}", status_code=204)
async def delete_template_item(template_id: int, item_id: int, db: AsyncSession = Depends(get_db)):
    item = await _get_item(db, template_id, item_id)
    await _ensure_unreferenced(db, await _get_template(db, template_id))
    await db.delete(item)


@router.post("/{template_id}/reorder-items", response_model=list[TemplateItemRead])
async def reorder_template_items(
    template_id: int, data: ReorderItemsRequest, db: AsyncSession = Depends(get_db),
):
    """Reordonner : order = position (1..n) dans la liste / Reorder: order = 1-based position in the list."""
    await _ensure_unreferenced(db, await _get_template(db, template_id))
    items = {item.id: item for item in await _items_of(db, template_id)}
    foreign = [item_id for item_id in data.item_ids if item_id not in items]
    if foreign:
        raise ChecklistValidationError(
            f"Items {', '.join(map(str, foreign))} do not belong to template {template_id}"
        )
    for position, item_id in enumerate(data.item_ids, 1):
        items[item_id].order = position
    await db.flush()
    return await _items_of(db, template_id)
