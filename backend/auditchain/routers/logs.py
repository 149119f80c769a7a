"""Read-only audit log endpoints.

Endpoints:
    GET /api/logs                                         Filtered list
    GET /api/logs/entity/{entity_type}/{entity_id}        History of one object
    GET /api/logs/inventory/{inventory_id}/movements      Stock movements
    GET /api/logs/inventory/{inventory_id}/quality-checks Quality checks
    GET /api/logs/suppliers/{supplier_id}                 Inventory logs by supplier
    GET /api/logs/recipients/{user_id}                    Notification logs by recipient
    GET /api/logs/mirror/dead-letters                     Failed ledger copies
    GET /api/logs/{log_id}                                One entry

There is deliberately no write endpoint: entries are only created
in-process through the facades.
"""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Query

from auditchain.deps import get_audit_logger, get_query_service
from auditchain.middleware.exceptions import LogNotFoundError
from auditchain.models.enums import EntityType, LogStatus
from auditchain.schemas.log_entry import DeadLetterEntry, LogEntry, LogListResponse
from auditchain.services.audit import AuditLogger
from auditchain.services.query import QueryService

router = APIRouter()


def _page(entries: list[LogEntry], total: int, limit: int, offset: int) -> LogListResponse:
    return LogListResponse(
        items=[e.to_wire() for e in entries],
        total=total,
        limit=limit,
        offset=offset,
    )


def _all(entries: list[LogEntry]) -> LogListResponse:
    return _page(entries, len(entries), len(entries), 0)


@router.get("", response_model=LogListResponse)
async def list_logs(
    type: str | None = Query(None),
    types: str | None = Query(None, description="Comma-separated list of types"),
    entity_type: EntityType | None = Query(None),
    entity_id: str | None = Query(None),
    performed_by: str | None = Query(None),
    status: LogStatus | None = Query(None),
    since: datetime | None = Query(None),
    until: datetime | None = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    query: QueryService = Depends(get_query_service),
):
    """List log entries, newest first, with optional filters."""
    filters: dict[str, Any] = {}
    if type:
        filters["type"] = type
    elif types:
        filters["type"] = {"$in": [t.strip() for t in types.split(",") if t.strip()]}
    if entity_type:
        filters["entity_type"] = entity_type
    if entity_id:
        filters["entity_id"] = entity_id
    if performed_by:
        filters["performed_by"] = performed_by
    if status:
        filters["status"] = status
    window: dict[str, datetime] = {}
    if since:
        window["$gte"] = since
    if until:
        window["$lt"] = until
    if window:
        filters["timestamp"] = window

    total = await query.count_logs(filters)
    items = await query.get_logs(filters, limit=limit, offset=offset)
    return _page(items, total, limit, offset)


@router.get("/entity/{entity_type}/{entity_id}", response_model=LogListResponse)
async def entity_logs(
    entity_type: EntityType,
    entity_id: str,
    query: QueryService = Depends(get_query_service),
):
    return _all(await query.get_entity_logs(entity_id, entity_type.value))


@router.get("/inventory/{inventory_id}/movements", response_model=LogListResponse)
async def inventory_movements(
    inventory_id: str,
    query: QueryService = Depends(get_query_service),
):
    return _all(await query.get_inventory_movements(inventory_id))


@router.get("/inventory/{inventory_id}/quality-checks", response_model=LogListResponse)
async def quality_checks(
    inventory_id: str,
    query: QueryService = Depends(get_query_service),
):
    return _all(await query.get_quality_check_history(inventory_id))


@router.get("/suppliers/{supplier_id}", response_model=LogListResponse)
async def supplier_logs(
    supplier_id: str,
    limit: int = Query(100, ge=1, le=500),
    query: QueryService = Depends(get_query_service),
):
    return _all(await query.get_supplier_logs(supplier_id, limit=limit))


@router.get("/recipients/{user_id}", response_model=LogListResponse)
async def recipient_logs(
    user_id: str,
    limit: int = Query(100, ge=1, le=500),
    query: QueryService = Depends(get_query_service),
):
    return _all(await query.get_recipient_logs(user_id, limit=limit))


@router.get("/mirror/dead-letters", response_model=list[DeadLetterEntry])
async def dead_letters(audit: AuditLogger = Depends(get_audit_logger)):
    """Ledger copies that failed or were dropped, most recent last."""
    if audit.dispatcher is None:
        return []
    return [
        DeadLetterEntry(
            log_id=d.log_id,
            reason=d.reason,
            failed_at=d.failed_at,
            payload=d.payload.to_wire(),
        )
        for d in audit.dispatcher.dead_letters
    ]


@router.get("/{log_id}")
async def get_log(
    log_id: str,
    query: QueryService = Depends(get_query_service),
):
    entry = await query.get_log(log_id)
    if entry is None:
        raise LogNotFoundError(log_id)
    return entry.to_wire()
