"""Query filter parsing shared by every store implementation.

Filters are plain mappings of field name to either a literal (equality)
or an operator mapping, Mongo style:

    {"entity_type": "inventory", "type": {"$in": ["inventory_restocked"]}}
    {"timestamp": {"$gte": start, "$lt": end}}

Field names may use the snake_case attribute or the camelCase wire name.
Every scalar column is filterable; the JSON columns (`data`, `metadata`,
`user_details`, `previous_state`, `new_state`) are not, since their
shape differs per entry type and has no portable SQL comparison.
"""

import enum
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from pydantic.alias_generators import to_snake

from auditchain.middleware.exceptions import InvalidFilterError

FILTERABLE_FIELDS = frozenset({
    "id",
    "type",
    "entity_type",
    "entity_id",
    "action",
    "performed_by",
    "status",
    "tx_hash",
    "block_number",
    "ip_address",
    "user_agent",
    "error",
    "execution_time",
    "timestamp",
})

OPERATORS = frozenset({"$eq", "$ne", "$in", "$nin", "$gt", "$gte", "$lt", "$lte"})
_SET_OPERATORS = {"$in", "$nin"}


@dataclass(frozen=True)
class Condition:
    field: str
    op: str
    value: Any


def _normalize_value(value: Any) -> Any:
    # str-enums compare by value; naive datetimes are taken as UTC
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _field_name(raw: str) -> str:
    name = to_snake(raw)
    if name not in FILTERABLE_FIELDS:
        raise InvalidFilterError(f"Cannot filter on field: {raw!r}")
    return name


def parse_filters(filters: Mapping[str, Any] | None) -> list[Condition]:
    """Turn a filter mapping into a flat list of conditions (ANDed)."""
    conditions: list[Condition] = []
    for raw_field, condition in (filters or {}).items():
        field = _field_name(raw_field)

        if not isinstance(condition, Mapping):
            conditions.append(Condition(field, "$eq", _normalize_value(condition)))
            continue

        if not condition:
            raise InvalidFilterError(f"Empty operator mapping for {raw_field!r}")

        for op, value in condition.items():
            if op not in OPERATORS:
                raise InvalidFilterError(f"Unsupported operator {op!r} on {raw_field!r}")
            if op in _SET_OPERATORS:
                if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
                    raise InvalidFilterError(f"{op} on {raw_field!r} needs a list of values")
                value = tuple(_normalize_value(v) for v in value)
            else:
                value = _normalize_value(value)
            conditions.append(Condition(field, op, value))
    return conditions


def matches(values: Mapping[str, Any], conditions: Iterable[Condition]) -> bool:
    """Evaluate conditions against a mapping of field values (in-memory stores)."""
    for cond in conditions:
        actual = values.get(cond.field)
        if cond.op == "$eq":
            ok = actual == cond.value
        elif cond.op == "$ne":
            ok = actual != cond.value
        elif cond.op == "$in":
            ok = actual in cond.value
        elif cond.op == "$nin":
            ok = actual not in cond.value
        else:
            # ordering comparisons never match a missing value
            if actual is None or cond.value is None:
                ok = False
            elif cond.op == "$gt":
                ok = actual > cond.value
            elif cond.op == "$gte":
                ok = actual >= cond.value
            elif cond.op == "$lt":
                ok = actual < cond.value
            else:
                ok = actual <= cond.value
        if not ok:
            return False
    return True
