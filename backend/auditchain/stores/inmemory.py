"""In-memory implementation of LogStore."""

import uuid
from typing import Any, Mapping

from auditchain.schemas.log_entry import LedgerReceipt, LogEntry, LogEntryInput
from auditchain.stores.base import LogStore, UtcClock, entry_clock
from auditchain.stores.filters import matches, parse_filters


class InMemoryLogStore(LogStore):
    """In-memory LogStore for tests and local development.

    Uses a dict keyed by id with linear scans for queries.
    Not suitable for production use.
    """

    def __init__(self, clock: UtcClock = entry_clock) -> None:
        self._entries: dict[str, LogEntry] = {}
        self._clock = clock

    async def create_log(self, entry: LogEntryInput) -> LogEntry:
        stored = LogEntry(
            **entry.model_dump(mode="json"),
            id=str(uuid.uuid4()),
            timestamp=self._clock.now(),
        )
        self._entries[stored.id] = stored
        return stored

    async def get_log(self, log_id: str) -> LogEntry | None:
        return self._entries.get(log_id)

    def _select(self, filters: Mapping[str, Any] | None) -> list[LogEntry]:
        conditions = parse_filters(filters)
        return [
            e for e in self._entries.values()
            if matches(e.model_dump(), conditions)
        ]

    async def get_logs(
        self,
        filters: Mapping[str, Any] | None = None,
        *,
        limit: int | None = 100,
        offset: int = 0,
        newest_first: bool = True,
    ) -> list[LogEntry]:
        results = self._select(filters)
        results = sorted(results, key=lambda e: e.timestamp, reverse=newest_first)
        if limit is None:
            return results[offset:]
        return results[offset:offset + limit]

    async def count_logs(self, filters: Mapping[str, Any] | None = None) -> int:
        return len(self._select(filters))

    async def attach_ledger_coordinates(self, log_id: str, receipt: LedgerReceipt) -> bool:
        entry = self._entries.get(log_id)
        if entry is None or entry.tx_hash:
            return False
        self._entries[log_id] = entry.model_copy(
            update={"tx_hash": receipt.tx_hash, "block_number": receipt.block_number}
        )
        return True
