"""Query service and filter tests (in-memory store)."""

from datetime import datetime, timedelta, timezone

import pytest

from auditchain.middleware.exceptions import InvalidFilterError
from auditchain.models.enums import EntityType
from auditchain.services.audit import build_audit_logger
from auditchain.stores.base import UtcClock
from auditchain.stores.filters import Condition, matches, parse_filters


async def _seed(audit):
    inv = audit.inventory
    await inv.log_movement({
        "inventory_id": "inv-1", "user_id": "supplier-1", "movement_type": "restock",
        "quantity": 10, "previous_quantity": 0, "new_quantity": 10,
    })
    await inv.log_movement({
        "inventory_id": "inv-1", "user_id": "supplier-1", "movement_type": "sale",
        "quantity": 4, "previous_quantity": 10, "new_quantity": 6,
    })
    await inv.log_low_stock({
        "inventory_id": "inv-1", "user_id": "supplier-1",
        "current_quantity": 6, "threshold": 8,
    })
    await inv.log_movement({
        "inventory_id": "inv-2", "user_id": "supplier-2", "movement_type": "damage",
        "quantity": 1, "previous_quantity": 5, "new_quantity": 4,
    })
    await audit.product.log_product({
        "type": "product_created", "product_id": "p-1", "user_id": "supplier-1",
        "action": "Created product",
    })
    if audit.dispatcher is not None:
        await audit.dispatcher.join()


@pytest.mark.unit
class TestFilters:
    def test_literal_is_equality(self):
        assert parse_filters({"type": "x"}) == [Condition("type", "$eq", "x")]

    def test_camel_case_field_names(self):
        [cond] = parse_filters({"entityType": EntityType.INVENTORY})
        assert cond == Condition("entity_type", "$eq", "inventory")

    def test_in_needs_a_list(self):
        with pytest.raises(InvalidFilterError):
            parse_filters({"type": {"$in": "inventory_restocked"}})

    def test_unknown_field(self):
        with pytest.raises(InvalidFilterError):
            parse_filters({"data.secret": 1})

    def test_unknown_operator(self):
        with pytest.raises(InvalidFilterError):
            parse_filters({"type": {"$regex": "inv.*"}})

    def test_empty_operator_mapping(self):
        with pytest.raises(InvalidFilterError):
            parse_filters({"type": {}})

    def test_naive_datetime_is_utc(self):
        [cond] = parse_filters({"timestamp": {"$gte": datetime(2026, 1, 1)}})
        assert cond.value.tzinfo == timezone.utc

    def test_json_columns_are_not_filterable(self):
        with pytest.raises(InvalidFilterError):
            parse_filters({"data": {"movementType": "restock"}})

    def test_ordering_never_matches_none(self):
        conditions = parse_filters({"block_number": {"$lt": 10}})
        assert not matches({"block_number": None}, conditions)
        assert matches({"block_number": 3}, conditions)


@pytest.mark.asyncio
class TestQueryService:
    async def test_composite_in_filter(self, audit):
        await _seed(audit)

        logs = await audit.query.get_logs({
            "entity_type": "inventory",
            "type": {"$in": ["inventory_restocked", "inventory_consumed"]},
        })

        assert sorted(e.type for e in logs) == ["inventory_consumed", "inventory_restocked"]

    async def test_nin_and_ne(self, audit):
        await _seed(audit)

        logs = await audit.query.get_logs({
            "entity_type": {"$ne": "product"},
            "type": {"$nin": ["inventory_low_stock"]},
        })
        assert len(logs) == 3

    async def test_reads_are_idempotent(self, audit):
        await _seed(audit)
        filters = {"performed_by": "supplier-1"}

        first = await audit.query.get_logs(filters)
        second = await audit.query.get_logs(filters)

        assert first == second
        assert await audit.query.count_logs(filters) == 4

    async def test_newest_first_with_paging(self, audit):
        await _seed(audit)

        everything = await audit.query.get_logs()
        page = await audit.query.get_logs(limit=2, offset=1)

        assert [e.timestamp for e in everything] == sorted(
            (e.timestamp for e in everything), reverse=True
        )
        assert page == everything[1:3]

    async def test_supplier_logs_are_inventory_only(self, audit):
        await _seed(audit)

        logs = await audit.query.get_supplier_logs("supplier-1")

        assert len(logs) == 3
        assert {e.entity_type for e in logs} == {"inventory"}

    async def test_entity_logs_oldest_first(self, audit):
        await _seed(audit)

        logs = await audit.query.get_entity_logs("inv-1", "inventory")

        assert [e.type for e in logs] == [
            "inventory_restocked",
            "inventory_consumed",
            "inventory_low_stock",
        ]

    async def test_user_logs_span_entities(self, audit):
        await _seed(audit)
        logs = await audit.query.get_user_logs("supplier-1")
        assert {e.entity_type for e in logs} == {"inventory", "product"}

    async def test_logs_between(self, audit):
        await _seed(audit)
        now = datetime.now(timezone.utc)

        inside = await audit.query.get_logs_between(now - timedelta(minutes=1), now + timedelta(minutes=1))
        product = await audit.query.get_logs_between(
            now - timedelta(minutes=1), now + timedelta(minutes=1), entity_type="product"
        )
        before = await audit.query.get_logs_between(now - timedelta(days=2), now - timedelta(days=1))

        assert len(inside) == 5
        assert len(product) == 1
        assert before == []

    async def test_unmirrored_logs(self, store, test_settings):
        store_only = build_audit_logger(store, None, test_settings)
        await _seed(store_only)
        now = datetime.now(timezone.utc)

        assert len(await store_only.query.get_unmirrored_logs()) == 5
        assert len(await store_only.query.get_unmirrored_logs(limit=2)) == 2
        assert await store_only.query.get_unmirrored_logs(older_than=now - timedelta(days=1)) == []

    async def test_mirrored_logs_leave_no_backlog(self, audit):
        await _seed(audit)
        assert await audit.query.get_unmirrored_logs() == []

    async def test_get_missing_log(self, audit):
        assert await audit.query.get_log("nope") is None

    async def test_invalid_filter_raises(self, audit):
        with pytest.raises(InvalidFilterError):
            await audit.query.get_logs({"password": "x"})

    async def test_scalar_columns_are_filterable(self, audit):
        await audit.log({
            "type": "login_failed",
            "entity_type": "auth",
            "entity_id": "u-7",
            "action": "Login failed for u-7",
            "status": "failed",
            "error": "bad password",
            "user_agent": "curl/8.5",
            "execution_time": 120.5,
        })
        await _seed(audit)

        [failed] = await audit.query.get_logs({"error": "bad password"})
        assert failed.entity_id == "u-7"
        assert await audit.query.count_logs({"userAgent": "curl/8.5"}) == 1
        assert await audit.query.count_logs({"execution_time": {"$gte": 100}}) == 1
        assert await audit.query.count_logs({"error": None}) == 5


@pytest.mark.unit
class TestUtcClock:
    def test_strictly_increasing_on_ties(self, monkeypatch):
        clock = UtcClock()
        fixed = datetime(2026, 1, 1, tzinfo=timezone.utc)
        monkeypatch.setattr(clock, "wall", lambda: fixed)

        stamps = [clock.now() for _ in range(3)]
        assert stamps == [fixed, fixed + timedelta(microseconds=1), fixed + timedelta(microseconds=2)]

    def test_follows_wall_clock_when_ahead(self, monkeypatch):
        clock = UtcClock()
        first = clock.now()
        later = first + timedelta(seconds=5)
        monkeypatch.setattr(clock, "wall", lambda: later)

        assert clock.now() == later
