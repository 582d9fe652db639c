"""Schemas templates de checklist / Checklist template schemas."""

from typing import Literal

from pydantic import Field

from fleetcheck.schemas.common import CamelModel


# --- Items ---

class TemplateItemCreate(CamelModel):
    label: str = Field(min_length=1, max_length=150)
    group: str = Field(min_length=1, max_length=50)
    column: Literal[1, 2] = 1
    order: int | None = None
    default_checked: bool = False
    criticality: int = Field(default=0, ge=0, le=2)
    active: bool = True


class TemplateItemUpdate(CamelModel):
    label: str | None = None
    group: str | None = None
    column: Literal[1, 2] | None = None
    order: int | None = None
    default_checked: bool | None = None
    criticality: int | None = Field(default=None, ge=0, le=2)
    active: bool | None = None


class TemplateItemRead(CamelModel):
    id: int
    checklist_template_id: int
    key: str | None = None
    label: str
    group: str
    column: int
    order: int
    default_checked: bool
    criticality: int
    active: bool


class ReorderItemsRequest(CamelModel):
    item_ids: list[int]


# --- Templates ---

class TemplateCreate(CamelModel):
    name: str = Field(min_length=1, max_length=150)
    description: str | None = None
    active: bool = True


class TemplateUpdate(CamelModel):
    name: str | None = None
    description: str | None = None
    active: bool | None = None


class TemplateRead(CamelModel):
    id: int
    name: str
    description: str | None = None
    active: bool
    created_at: str | None = None
