"""Query service: read-only views over the authoritative store.

Filters pass straight through to the store (see `stores/filters.py` for
the accepted shapes). The derived queries are just named filters.
"""

from datetime import datetime
from typing import Any, Mapping

from auditchain.models.enums import (
    INVENTORY_MOVEMENT_TYPES,
    EntityType,
    InventoryLogType,
)
from auditchain.schemas.log_entry import LogEntry
from auditchain.stores.base import LogStore


class QueryService:
    def __init__(self, store: LogStore):
        self.store = store

    async def get_logs(
        self,
        filters: Mapping[str, Any] | None = None,
        *,
        limit: int | None = 100,
        offset: int = 0,
        newest_first: bool = True,
    ) -> list[LogEntry]:
        return await self.store.get_logs(
            filters, limit=limit, offset=offset, newest_first=newest_first
        )

    async def count_logs(self, filters: Mapping[str, Any] | None = None) -> int:
        return await self.store.count_logs(filters)

    async def get_log(self, log_id: str) -> LogEntry | None:
        return await self.store.get_log(log_id)

    async def get_entity_logs(self, entity_id: str, entity_type: str) -> list[LogEntry]:
        """Every entry for one domain object, oldest first."""
        return await self.store.get_entity_logs(str(entity_id), entity_type)

    async def get_supplier_logs(self, supplier_id: str, *, limit: int | None = 100) -> list[LogEntry]:
        return await self.get_logs(
            {"entity_type": EntityType.INVENTORY, "performed_by": str(supplier_id)},
            limit=limit,
        )

    async def get_recipient_logs(self, user_id: str, *, limit: int | None = 100) -> list[LogEntry]:
        return await self.get_logs(
            {"entity_type": EntityType.NOTIFICATION, "performed_by": str(user_id)},
            limit=limit,
        )

    async def get_inventory_movements(self, inventory_id: str) -> list[LogEntry]:
        """Stock movements for one item, oldest first."""
        return await self.get_logs(
            {
                "entity_type": EntityType.INVENTORY,
                "entity_id": str(inventory_id),
                "type": {"$in": INVENTORY_MOVEMENT_TYPES},
            },
            limit=None,
            newest_first=False,
        )

    async def get_quality_check_history(self, inventory_id: str) -> list[LogEntry]:
        return await self.get_logs(
            {
                "entity_type": EntityType.INVENTORY,
                "entity_id": str(inventory_id),
                "type": InventoryLogType.QUALITY_CHECK,
            },
            limit=None,
            newest_first=False,
        )

    async def get_user_logs(self, user_id: str, *, limit: int | None = 100) -> list[LogEntry]:
        return await self.get_logs({"performed_by": str(user_id)}, limit=limit)

    async def get_logs_between(
        self,
        start: datetime,
        end: datetime,
        *,
        entity_type: str | None = None,
        limit: int | None = None,
    ) -> list[LogEntry]:
        """Entries with start <= timestamp < end, oldest first."""
        filters: dict[str, Any] = {"timestamp": {"$gte": start, "$lt": end}}
        if entity_type is not None:
            filters["entity_type"] = entity_type
        return await self.get_logs(filters, limit=limit, newest_first=False)

    async def get_unmirrored_logs(
        self,
        *,
        older_than: datetime | None = None,
        limit: int | None = 100,
    ) -> list[LogEntry]:
        """Entries that never received ledger coordinates, oldest first."""
        filters: dict[str, Any] = {"tx_hash": None}
        if older_than is not None:
            filters["timestamp"] = {"$lt": older_than}
        return await self.get_logs(filters, limit=limit, newest_first=False)
