"""Routes Historique / Audit log API routes."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetcheck.database import get_db
from fleetcheck.models.audit import AuditLog
from fleetcheck.schemas.audit import AuditLogPage, AuditLogRead

router = APIRouter()


@router.get("/", response_model=AuditLogPage)
async def list_audit_logs(
    entity_type: str | None = Query(default=None),
    entity_id: int | None = Query(default=None),
    action: str | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """Historique des transitions, plus recent d'abord / Transition history, newest first."""
    filters = []
    if entity_type:
        filters.append(AuditLog.entity_type == entity_type)
    if entity_id is not None:
        filters.append(AuditLog.entity_id == entity_id)
    if action:
        filters.append(AuditLog.action == action.upper())

    total = await db.scalar(select(func.count(AuditLog.id)).where(*filters)) or 0
    result = await db.execute(
        select(AuditLog).where(*filters).order_by(AuditLog.id.desc()).offset(offset).limit(limit)
    )
    return AuditLogPage(total=total, items=[AuditLogRead.model_validate(log) for log in result.scalars().all()])
