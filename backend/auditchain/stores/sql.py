"""SQLAlchemy (async) implementation of LogStore.

Every operation runs in its own short-lived session so that a log write
commits independently of whatever transaction the caller has open.
"""

from datetime import timezone
from typing import Any, Mapping

from sqlalchemy import and_, func, or_, select, true, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from auditchain.middleware.exceptions import LogStoreError
from auditchain.models.log_entry import LogEntryRecord
from auditchain.schemas.log_entry import LedgerReceipt, LogEntry, LogEntryInput
from auditchain.stores.base import LogStore, UtcClock, entry_clock
from auditchain.stores.filters import Condition, parse_filters


def _column(field: str):
    return getattr(LogEntryRecord, field)


def _clause(cond: Condition):
    # NULL follows the in-memory semantics: None equals None, and a NULL
    # column is "not equal" to / "not in" any concrete value
    col = _column(cond.field)
    if cond.op == "$eq":
        return col.is_(None) if cond.value is None else col == cond.value
    if cond.op == "$ne":
        if cond.value is None:
            return col.is_not(None)
        return or_(col != cond.value, col.is_(None))
    if cond.op in ("$in", "$nin"):
        values = [v for v in cond.value if v is not None]
        has_none = len(values) != len(cond.value)
        if cond.op == "$in":
            clause = col.in_(values)
            return or_(clause, col.is_(None)) if has_none else clause
        if has_none:
            return and_(col.not_in(values), col.is_not(None)) if values else col.is_not(None)
        return or_(col.not_in(values), col.is_(None)) if values else true()
    if cond.op == "$gt":
        return col > cond.value
    if cond.op == "$gte":
        return col >= cond.value
    if cond.op == "$lt":
        return col < cond.value
    return col <= cond.value


def _to_entry(row: LogEntryRecord) -> LogEntry:
    timestamp = row.timestamp
    if timestamp.tzinfo is None:
        # SQLite drops the offset; everything is written in UTC
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return LogEntry(
        id=row.id,
        type=row.type,
        entity_type=row.entity_type,
        entity_id=row.entity_id,
        action=row.action,
        performed_by=row.performed_by,
        user_details=row.user_details,
        status=row.status,
        data=row.data or {},
        previous_state=row.previous_state,
        new_state=row.new_state,
        error=row.error,
        ip_address=row.ip_address,
        user_agent=row.user_agent,
        metadata=row.extra_metadata or {},
        execution_time=row.execution_time,
        tx_hash=row.tx_hash,
        block_number=row.block_number,
        timestamp=timestamp,
    )


class SqlAlchemyLogStore(LogStore):
    """LogStore backed by the `audit_logs` table."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: UtcClock = entry_clock,
    ):
        self._session_factory = session_factory
        self._clock = clock

    async def create_log(self, entry: LogEntryInput) -> LogEntry:
        values = entry.model_dump(mode="json")
        values["extra_metadata"] = values.pop("metadata")
        values["timestamp"] = self._clock.now()
        row = LogEntryRecord(**values)
        try:
            async with self._session_factory() as db:
                db.add(row)
                await db.commit()
                await db.refresh(row)
                return _to_entry(row)
        except SQLAlchemyError as e:
            raise LogStoreError(f"Failed to persist log entry: {e}") from e

    async def get_log(self, log_id: str) -> LogEntry | None:
        async with self._session_factory() as db:
            row = await db.get(LogEntryRecord, log_id)
            return _to_entry(row) if row else None

    async def get_logs(
        self,
        filters: Mapping[str, Any] | None = None,
        *,
        limit: int | None = 100,
        offset: int = 0,
        newest_first: bool = True,
    ) -> list[LogEntry]:
        query = select(LogEntryRecord).where(
            *(_clause(c) for c in parse_filters(filters))
        )
        order = LogEntryRecord.timestamp.desc() if newest_first else LogEntryRecord.timestamp.asc()
        # id only separates entries written by different processes in the same microsecond
        query = query.order_by(order, LogEntryRecord.id).offset(offset)
        if limit is not None:
            query = query.limit(limit)

        async with self._session_factory() as db:
            result = await db.execute(query)
            return [_to_entry(r) for r in result.scalars().all()]

    async def count_logs(self, filters: Mapping[str, Any] | None = None) -> int:
        query = select(func.count()).select_from(LogEntryRecord).where(
            *(_clause(c) for c in parse_filters(filters))
        )
        async with self._session_factory() as db:
            result = await db.execute(query)
            return result.scalar() or 0

    async def attach_ledger_coordinates(self, log_id: str, receipt: LedgerReceipt) -> bool:
        # only fills empty coordinates; a confirmed entry is never rewritten
        stmt = (
            update(LogEntryRecord)
            .where(LogEntryRecord.id == log_id, LogEntryRecord.tx_hash.is_(None))
            .values(tx_hash=receipt.tx_hash, block_number=receipt.block_number)
        )
        async with self._session_factory() as db:
            result = await db.execute(stmt)
            await db.commit()
            return result.rowcount == 1
