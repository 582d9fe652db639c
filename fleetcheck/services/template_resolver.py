"""Resolution des items d'inspection / Inspection item set resolution.

Pour un checklist : template explicite, sinon detection legacy par les
cles stockees, sinon template du type de vehicule, sinon configuration
legacy (distante puis integree).
For a checklist: explicit template, else legacy detection from stored
keys, else the vehicle type's template, else legacy configuration
(remote, then built-in).
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetcheck.models.checklist_template import ChecklistTemplate, ChecklistTemplateItem
from fleetcheck.models.vehicle import Vehicle
from fleetcheck.models.vehicle_checklist import VehicleChecklist
from fleetcheck.models.vehicle_type import VehicleType
from fleetcheck.services.errors import NotFoundError
from fleetcheck.services.value_normalizer import parse_inspection
from fleetcheck.utils.checklist_constants import (
    GROUP_LABELS,
    GROUP_ORDER,
    LEGACY_ITEMS,
    MODERN_KEY_PREFIX,
    NOTES_KEY,
)

logger = logging.getLogger(__name__)

SOURCE_TEMPLATE = "template"
SOURCE_LEGACY = "legacy"


@dataclass(frozen=True)
class ResolvedItem:
    key: str
    label: str
    group: str
    column: int = 1
    order: int = 0
    default_checked: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ResolvedGroup:
    key: str
    label: str


@dataclass(frozen=True)
class Resolution:
    """Items + groupes a afficher/valider / Items and groups to render or validate."""
    source: str
    template_id: int | None
    items: list[ResolvedItem]
    groups: list[ResolvedGroup]


def builtin_legacy_items() -> list[ResolvedItem]:
    return [
        ResolvedItem(key=key, label=label, group=group, column=column, order=order)
        for key, label, group, column, order in LEGACY_ITEMS
    ]


def template_item_to_resolved(item: ChecklistTemplateItem) -> ResolvedItem:
    """Les checklists modernes stockent l'id de l'item / Modern records key values by item id."""
    return ResolvedItem(
        key=str(item.id),
        label=item.label,
        group=item.group,
        column=item.column or 1,
        order=item.order or 0,
        default_checked=bool(item.default_checked),
    )


def looks_legacy(inspection_start: dict[str, Any]) -> bool:
    """Mapping non vide sans aucune cle "obs_" / Non-empty mapping with no "obs_" key.

    La cle "notes" compte comme une cle comme les autres.
    The "notes" key counts like any other key.
    """
    if not inspection_start:
        return False
    return not any(str(key).startswith(MODERN_KEY_PREFIX) for key in inspection_start)


def build_groups(items: list[ResolvedItem]) -> list[ResolvedGroup]:
    """Groupes distincts, ordonnes selon l'ordre legacy quand connu.

    Distinct groups; known legacy groups are sorted among the slots they
    occupy, unknown groups keep their discovery position.
    """
    discovered: list[str] = []
    for item in items:
        if item.group not in discovered:
            discovered.append(item.group)

    known_slots = [i for i, key in enumerate(discovered) if key in GROUP_LABELS]
    known_sorted = sorted((discovered[i] for i in known_slots), key=GROUP_ORDER.index)
    ordered = list(discovered)
    for slot, key in zip(known_slots, known_sorted):
        ordered[slot] = key

    return [ResolvedGroup(key=key, label=GROUP_LABELS.get(key, key)) for key in ordered]


def make_resolution(source: str, template_id: int | None, items: list[ResolvedItem]) -> Resolution:
    ordered = sorted(items, key=lambda it: it.order)
    return Resolution(source=source, template_id=template_id, items=ordered, groups=build_groups(ordered))


def required_keys(resolution: Resolution) -> list[str]:
    return [item.key for item in resolution.items if item.key != NOTES_KEY]


class TemplateResolver:
    """Resolution rejouable pour un checklist donne / Deterministic resolution for a stored checklist."""

    def __init__(self, legacy_settings):
        self.legacy_settings = legacy_settings

    async def template_items(self, session: AsyncSession, template_id: int) -> list[ResolvedItem]:
        template = await session.get(ChecklistTemplate, template_id)
        if template is None:
            raise NotFoundError(f"Checklist template {template_id} not found")
        result = await session.execute(
            select(ChecklistTemplateItem)
            .where(
                ChecklistTemplateItem.checklist_template_id == template_id,
                ChecklistTemplateItem.active.is_(True),
            )
            .order_by(ChecklistTemplateItem.order, ChecklistTemplateItem.id)
        )
        return [template_item_to_resolved(it) for it in result.scalars().all()]

    async def template_for_vehicle(self, session: AsyncSession, vehicle_id: int) -> int | None:
        """Template du type de vehicule, ou None / Vehicle type's template id, or None."""
        vehicle = await session.get(Vehicle, vehicle_id)
        if vehicle is None:
            raise NotFoundError(f"Vehicle {vehicle_id} not found")
        if vehicle.vehicle_type_id is None:
            return None
        vtype = await session.get(VehicleType, vehicle.vehicle_type_id)
        if vtype is None:
            return None
        return vtype.checklist_template_id

    async def legacy(self) -> Resolution:
        items = await self.legacy_settings.get_items()
        return make_resolution(SOURCE_LEGACY, None, items)

    async def resolve(self, session: AsyncSession, checklist: VehicleChecklist) -> Resolution:
        # 1. Template explicite, meme vide / Explicit template, even when empty
        if checklist.checklist_template_id is not None:
            items = await self.template_items(session, checklist.checklist_template_id)
            return make_resolution(SOURCE_TEMPLATE, checklist.checklist_template_id, items)

        # 2. Cles historiques / Historical key shape
        if looks_legacy(parse_inspection(checklist.inspection_start)):
            logger.debug("Checklist %s classified as legacy from its keys", checklist.id)
            return await self.legacy()

        # 3. Type de vehicule / Vehicle type
        template_id = await self.template_for_vehicle(session, checklist.vehicle_id)
        if template_id is not None:
            items = await self.template_items(session, template_id)
            return make_resolution(SOURCE_TEMPLATE, template_id, items)

        # 4. Configuration legacy / Legacy configuration
        return await self.legacy()
