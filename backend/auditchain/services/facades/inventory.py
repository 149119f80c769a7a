"""Inventory facade.

Unlike the commerce facades, inventory helpers derive the type tag
themselves: stock movements go through the `MOVEMENT_LOG_TYPES` table,
everything else has a fixed tag per helper. The acting user is the
supplier or vendor who owns the stock, so `performed_by` doubles as the
"logs by supplier" key.
"""

from typing import Any, Mapping, Union

from auditchain.models.enums import (
    EntityType,
    InventoryLogType,
    LogStatus,
    QualityCheckResult,
    movement_log_type,
)
from auditchain.schemas.events import (
    BatchOperation,
    InventoryCreated,
    InventoryDeleted,
    InventoryMovement,
    InventoryUpdated,
    LocationChange,
    QualityCheck,
    ReorderAlert,
    StatusChange,
    StockAlert,
)
from auditchain.schemas.results import LogResult
from auditchain.services.facades.base import Facade, compact, guarded, parse

Event = Mapping[str, Any]


def _label(event) -> str:
    return event.inventory_name or event.inventory_id


def _fmt(quantity: float) -> str:
    return f"{quantity:g}"


def changed_fields(previous: Mapping[str, Any], new: Mapping[str, Any]) -> list[str]:
    """Keys whose value differs between two snapshots (added/removed included)."""
    keys = set(previous) | set(new)
    return sorted(k for k in keys if previous.get(k) != new.get(k))


class InventoryFacade(Facade):
    entity_type = EntityType.INVENTORY

    @guarded
    async def log_created(self, event: Union[InventoryCreated, Event]) -> LogResult:
        event = parse(InventoryCreated, event)
        snapshot = compact({
            "name": event.name,
            "quantity": event.quantity,
            "unit": event.unit,
            "price": event.price,
            "category": event.category,
            "location": event.location,
        })
        return await self._record(
            event,
            type=InventoryLogType.CREATED.value,
            action=event.action or f"Inventory item created: {event.name}",
            entity_id=event.inventory_id,
            data=snapshot,
            new_state=snapshot,
        )

    @guarded
    async def log_updated(self, event: Union[InventoryUpdated, Event]) -> LogResult:
        event = parse(InventoryUpdated, event)
        changed = changed_fields(event.previous_state, event.new_state)
        return await self._record(
            event,
            type=InventoryLogType.UPDATED.value,
            action=event.action or f"Inventory item updated: {_label(event)}",
            entity_id=event.inventory_id,
            data={"changedFields": changed},
            previous_state=event.previous_state,
            new_state=event.new_state,
        )

    @guarded
    async def log_deleted(self, event: Union[InventoryDeleted, Event]) -> LogResult:
        event = parse(InventoryDeleted, event)
        return await self._record(
            event,
            type=InventoryLogType.DELETED.value,
            action=event.action or f"Inventory item deleted: {_label(event)}",
            entity_id=event.inventory_id,
            data=compact({"reason": event.reason}),
            previous_state=event.previous_state,
        )

    @guarded
    async def log_movement(self, event: Union[InventoryMovement, Event]) -> LogResult:
        """Record a stock movement; the log type follows the movement taxonomy."""
        event = parse(InventoryMovement, event)
        log_type = movement_log_type(event.movement_type)
        movement = str(getattr(event.movement_type, "value", event.movement_type))
        return await self._record(
            event,
            type=log_type.value,
            action=event.action or (
                f"{movement.capitalize()} of {_fmt(event.quantity)} units"
                f" for {_label(event)}"
            ),
            entity_id=event.inventory_id,
            data=compact({
                "movementType": movement,
                "quantity": event.quantity,
                "reason": event.reason,
                "referenceId": event.reference_id,
                "fromLocation": event.from_location,
                "toLocation": event.to_location,
            }),
            previous_state={"quantity": event.previous_quantity},
            new_state={"quantity": event.new_quantity},
        )

    @guarded
    async def log_quality_check(self, event: Union[QualityCheck, Event]) -> LogResult:
        event = parse(QualityCheck, event)
        failed = event.inspection_result == QualityCheckResult.FAILED.value
        return await self._record(
            event,
            type=InventoryLogType.QUALITY_CHECK.value,
            action=event.action or (
                f"Quality check {event.inspection_result}: "
                f"{_fmt(event.passed_quantity)}/{_fmt(event.checked_quantity)} passed"
            ),
            entity_id=event.inventory_id,
            status=LogStatus.FAILED if failed else event.status,
            data=compact({
                "inspectionResult": event.inspection_result,
                "checkedQuantity": event.checked_quantity,
                "passedQuantity": event.passed_quantity,
                "rejectedQuantity": event.rejected_quantity,
                "defectTypes": event.defect_types,
                "inspector": event.inspector,
                "batchNumber": event.batch_number,
                "notes": event.notes,
                "inspectionDate": event.inspection_date.isoformat() if event.inspection_date else None,
            }),
        )

    async def _stock_alert(self, event: StockAlert, log_type: InventoryLogType, label: str) -> LogResult:
        unit = f" {event.unit}" if event.unit else ""
        return await self._record(
            event,
            type=log_type.value,
            action=event.action or (
                f"{label}: {_label(event)} at {_fmt(event.current_quantity)}{unit}"
                f" (threshold {_fmt(event.threshold)})"
            ),
            entity_id=event.inventory_id,
            data=compact({
                "currentQuantity": event.current_quantity,
                "threshold": event.threshold,
                "unit": event.unit,
            }),
            metadata={"alert": True},
        )

    @guarded
    async def log_low_stock(self, event: Union[StockAlert, Event]) -> LogResult:
        event = parse(StockAlert, event)
        return await self._stock_alert(event, InventoryLogType.LOW_STOCK, "Low stock")

    @guarded
    async def log_out_of_stock(self, event: Union[StockAlert, Event]) -> LogResult:
        event = parse(StockAlert, event)
        return await self._stock_alert(event, InventoryLogType.OUT_OF_STOCK, "Out of stock")

    @guarded
    async def log_reorder_alert(self, event: Union[ReorderAlert, Event]) -> LogResult:
        event = parse(ReorderAlert, event)
        return await self._record(
            event,
            type=InventoryLogType.REORDER_ALERT.value,
            action=event.action or (
                f"Reorder needed: {_label(event)} at {_fmt(event.current_quantity)}"
                f" (reorder level {_fmt(event.reorder_level)})"
            ),
            entity_id=event.inventory_id,
            data=compact({
                "currentQuantity": event.current_quantity,
                "reorderLevel": event.reorder_level,
                "reorderQuantity": event.reorder_quantity,
                "supplierId": event.supplier_id,
            }),
            metadata={"alert": True},
        )

    @guarded
    async def log_batch_operation(self, event: Union[BatchOperation, Event]) -> LogResult:
        event = parse(BatchOperation, event)
        return await self._record(
            event,
            type=InventoryLogType.BATCH_OPERATION.value,
            action=event.action or f"Batch {event.operation}: {len(event.affected_ids)} item(s)",
            entity_id=event.inventory_id,
            data=compact({
                "operation": event.operation,
                "batchNumber": event.batch_number,
                "quantity": event.quantity,
                "affectedIds": event.affected_ids,
            }),
            metadata={"affectedCount": len(event.affected_ids)},
        )

    @guarded
    async def log_location_change(self, event: Union[LocationChange, Event]) -> LogResult:
        event = parse(LocationChange, event)
        return await self._record(
            event,
            type=InventoryLogType.LOCATION_CHANGED.value,
            action=event.action or (
                f"Location changed: {event.previous_location or 'unknown'} -> {event.new_location}"
            ),
            entity_id=event.inventory_id,
            data=compact({"reason": event.reason}),
            previous_state={"location": event.previous_location},
            new_state={"location": event.new_location},
        )

    @guarded
    async def log_status_change(self, event: Union[StatusChange, Event]) -> LogResult:
        event = parse(StatusChange, event)
        return await self._record(
            event,
            type=InventoryLogType.STATUS_CHANGED.value,
            action=event.action or (
                f"Status changed: {event.previous_status or 'unknown'} -> {event.new_status}"
            ),
            entity_id=event.inventory_id,
            data=compact({"reason": event.reason}),
            previous_state={"status": event.previous_status},
            new_state={"status": event.new_status},
        )
