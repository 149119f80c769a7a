"""LogStore: interface of the authoritative audit store."""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

from auditchain.schemas.log_entry import LedgerReceipt, LogEntry, LogEntryInput


class UtcClock:
    """Strictly increasing UTC timestamps within one process.

    Entries written in the same microsecond would otherwise tie, and
    timestamp order is the only order the stores promise.
    """

    def __init__(self) -> None:
        self._last: datetime | None = None

    def wall(self) -> datetime:
        return datetime.now(timezone.utc)

    def now(self) -> datetime:
        current = self.wall()
        if self._last is not None and current <= self._last:
            current = self._last + timedelta(microseconds=1)
        self._last = current
        return current


# shared so that several stores in one process still agree on order
entry_clock = UtcClock()


class LogStore(ABC):
    """Source of truth for log entries.

    Entries are append-only: `create_log` assigns the id and timestamp,
    and `attach_ledger_coordinates` is the single permitted follow-up
    write. Nothing is ever updated otherwise or deleted.
    """

    @abstractmethod
    async def create_log(self, entry: LogEntryInput) -> LogEntry:
        """Persist an entry and return it with id and timestamp assigned."""

    @abstractmethod
    async def get_log(self, log_id: str) -> LogEntry | None:
        """Fetch one entry by id."""

    @abstractmethod
    async def get_logs(
        self,
        filters: Mapping[str, Any] | None = None,
        *,
        limit: int | None = 100,
        offset: int = 0,
        newest_first: bool = True,
    ) -> list[LogEntry]:
        """Return entries matching all filters, ordered by timestamp."""

    @abstractmethod
    async def count_logs(self, filters: Mapping[str, Any] | None = None) -> int:
        """Count entries matching all filters."""

    async def get_entity_logs(self, entity_id: str, entity_type: str) -> list[LogEntry]:
        """All entries for one domain object, oldest first."""
        return await self.get_logs(
            {"entity_id": str(entity_id), "entity_type": entity_type},
            limit=None,
            newest_first=False,
        )

    @abstractmethod
    async def attach_ledger_coordinates(self, log_id: str, receipt: LedgerReceipt) -> bool:
        """Record where an entry landed on the ledger.

        Returns False when the entry does not exist or already carries
        coordinates; existing coordinates are never overwritten.
        """
