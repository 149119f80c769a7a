"""SqlAlchemyLogStore tests against SQLite (aiosqlite)."""

from datetime import datetime, timedelta, timezone

import pytest

from auditchain.middleware.exceptions import InvalidFilterError
from auditchain.schemas.log_entry import LedgerReceipt, LogEntryInput
from auditchain.services.audit import build_audit_logger
from auditchain.stores import InMemoryLogStore
from auditchain.stores.base import UtcClock
from auditchain.stores.sql import SqlAlchemyLogStore


class FrozenClock(UtcClock):
    def wall(self) -> datetime:
        return datetime(2026, 1, 1, tzinfo=timezone.utc)


def _input(**overrides) -> LogEntryInput:
    values = {
        "type": "inventory_restocked",
        "entity_type": "inventory",
        "entity_id": "inv-1",
        "action": "Restock of 10 units for inv-1",
        "performed_by": "supplier-1",
        "data": {"movementType": "restock", "quantity": 10},
        "metadata": {"source": "test"},
        "previous_state": {"quantity": 0},
        "new_state": {"quantity": 10},
    }
    values.update(overrides)
    return LogEntryInput(**values)


@pytest.mark.integration
@pytest.mark.asyncio
class TestSqlAlchemyLogStore:
    async def test_round_trip(self, sql_store):
        created = await sql_store.create_log(_input())
        fetched = await sql_store.get_log(created.id)

        assert fetched == created
        assert fetched.metadata == {"source": "test"}
        assert fetched.data["quantity"] == 10
        assert fetched.timestamp.tzinfo is not None
        assert fetched.tx_hash is None

    async def test_missing(self, sql_store):
        assert await sql_store.get_log("missing") is None

    async def test_filters_and_count(self, sql_store):
        await sql_store.create_log(_input())
        await sql_store.create_log(_input(type="inventory_consumed"))
        await sql_store.create_log(_input(type="inventory_low_stock"))
        await sql_store.create_log(_input(entity_id="inv-2", performed_by="supplier-2"))

        movements = await sql_store.get_logs({
            "entity_id": "inv-1",
            "type": {"$in": ["inventory_restocked", "inventory_consumed"]},
        })
        assert sorted(e.type for e in movements) == ["inventory_consumed", "inventory_restocked"]
        assert await sql_store.count_logs({"performedBy": "supplier-1"}) == 3
        assert await sql_store.count_logs({"type": {"$nin": ["inventory_restocked"]}}) == 2
        assert await sql_store.count_logs() == 4

    async def test_paging_and_order(self, sql_store):
        for i in range(5):
            await sql_store.create_log(_input(entity_id=f"inv-{i}"))

        newest = await sql_store.get_logs(limit=2)
        oldest = await sql_store.get_logs(limit=None, newest_first=False)

        assert len(newest) == 2
        assert len(oldest) == 5
        assert [e.timestamp for e in oldest] == sorted(e.timestamp for e in oldest)
        assert newest[0].timestamp >= newest[1].timestamp

    async def test_time_window(self, sql_store):
        await sql_store.create_log(_input())
        now = datetime.now(timezone.utc)

        assert await sql_store.count_logs({"timestamp": {"$gte": now - timedelta(minutes=1)}}) == 1
        assert await sql_store.count_logs({"timestamp": {"$lt": now - timedelta(minutes=1)}}) == 0

    async def test_attach_coordinates_once(self, sql_store):
        created = await sql_store.create_log(_input())

        assert await sql_store.attach_ledger_coordinates(
            created.id, LedgerReceipt(tx_hash="f" * 64, block_number=3)
        )
        assert not await sql_store.attach_ledger_coordinates(
            created.id, LedgerReceipt(tx_hash="e" * 64, block_number=4)
        )
        assert not await sql_store.attach_ledger_coordinates(
            "missing", LedgerReceipt(tx_hash="e" * 64, block_number=4)
        )

        fetched = await sql_store.get_log(created.id)
        assert (fetched.tx_hash, fetched.block_number) == ("f" * 64, 3)
        assert await sql_store.count_logs({"tx_hash": None}) == 0

    async def test_invalid_filter(self, sql_store):
        with pytest.raises(InvalidFilterError):
            await sql_store.get_logs({"user_agent": {"$foo": 1}})

    async def test_full_pipeline(self, sql_store, ledger, test_settings):
        audit = build_audit_logger(sql_store, ledger, test_settings)
        audit.start()
        try:
            result = await audit.inventory.log_movement({
                "inventory_id": "inv-9",
                "inventory_name": "Linen",
                "user_id": "supplier-1",
                "movement_type": "transfer",
                "quantity": 5,
                "previous_quantity": 20,
                "new_quantity": 15,
            })
            await audit.dispatcher.join()
        finally:
            await audit.stop()

        assert result.ok
        stored = await sql_store.get_log(result.entry.id)
        assert stored.type == "inventory_transferred"
        assert stored.tx_hash == ledger.get(stored.id).tx_hash
        assert [m.id for m in await audit.query.get_inventory_movements("inv-9")] == [stored.id]

    async def test_same_wall_time_keeps_creation_order(self, sql_store):
        store = SqlAlchemyLogStore(sql_store._session_factory, clock=FrozenClock())
        created = [await store.create_log(_input(entity_id=f"inv-{i}")) for i in range(6)]

        oldest = await store.get_logs(limit=None, newest_first=False)
        newest = await store.get_logs(limit=None)

        assert [e.id for e in oldest] == [e.id for e in created]
        assert [e.id for e in newest] == [e.id for e in reversed(created)]
        assert len({e.timestamp for e in oldest}) == 6


NULL_FILTERS = [
    ({"performed_by": {"$ne": "supplier-1"}}, 1),
    ({"performed_by": {"$nin": ["supplier-1"]}}, 1),
    ({"performed_by": {"$nin": ["supplier-1", None]}}, 0),
    ({"performed_by": {"$nin": []}}, 2),
    ({"performed_by": {"$in": [None]}}, 1),
    ({"performed_by": {"$in": ["supplier-1", None]}}, 2),
    ({"performed_by": {"$ne": None}}, 1),
    ({"performed_by": None}, 1),
]


@pytest.mark.integration
@pytest.mark.asyncio
class TestNullFilters:
    """A NULL column compares the same way in SQL as in memory."""

    @pytest.mark.parametrize("filters,expected", NULL_FILTERS)
    async def test_sql_store(self, sql_store, filters, expected):
        await sql_store.create_log(_input())
        await sql_store.create_log(_input(performed_by=None))

        assert await sql_store.count_logs(filters) == expected
        assert len(await sql_store.get_logs(filters)) == expected

    @pytest.mark.parametrize("filters,expected", NULL_FILTERS)
    async def test_matches_in_memory_store(self, filters, expected):
        store = InMemoryLogStore()
        await store.create_log(_input())
        await store.create_log(_input(performed_by=None))

        assert await store.count_logs(filters) == expected
