"""Parameter structs for the domain facades, one per domain action.

Each struct is validated when it is built; facades accept either an
instance or a plain mapping (snake_case or camelCase keys) and turn a
validation failure into a `Failed` result rather than an exception.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from auditchain.models.enums import (
    AuthLogType,
    CartLogType,
    DeliveryStatus,
    LogStatus,
    OrderLogType,
    ProductLogType,
    QualityCheckResult,
    VendorRequestLogType,
    WalletLogType,
)


class EventBase(BaseModel):
    """Fields every domain event can carry."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        extra="forbid",
    )

    user_id: str | None = None
    user_details: dict[str, Any] | None = None
    status: LogStatus = LogStatus.SUCCESS
    data: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    execution_time: float | None = Field(default=None, ge=0)

    @field_validator("data", "metadata", mode="before")
    @classmethod
    def _null_mapping(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("status", mode="before")
    @classmethod
    def _null_status(cls, v: Any) -> Any:
        return LogStatus.SUCCESS if v is None else v

    @model_validator(mode="before")
    @classmethod
    def _stringify_ids(cls, values: Any) -> Any:
        # ObjectIds / UUIDs / ints in *_id fields become strings
        if not isinstance(values, dict):
            return values
        out = dict(values)
        for key, value in values.items():
            if (key.endswith("_id") or key.endswith("Id")) and value is not None \
                    and not isinstance(value, str):
                out[key] = str(value)
        return out


class TaxonomyEvent(EventBase):
    """Events whose caller picks the type tag and writes the action text."""

    action: str = Field(min_length=1)

    @field_validator("type", mode="before", check_fields=False)
    @classmethod
    def _underscore_type(cls, v: Any) -> Any:
        # older call sites used hyphenated tags, e.g. "wallet-frozen"
        if isinstance(v, str):
            return v.strip().replace("-", "_")
        return v


# ── Auth / product / order / wallet / cart ───────────────────

class AuthEvent(TaxonomyEvent):
    type: AuthLogType
    ip_address: str | None = None
    user_agent: str | None = None


class ProductEvent(TaxonomyEvent):
    type: ProductLogType
    product_id: str
    previous_state: dict[str, Any] | None = None
    new_state: dict[str, Any] | None = None


class OrderEvent(TaxonomyEvent):
    type: OrderLogType
    order_id: str
    previous_state: dict[str, Any] | None = None
    new_state: dict[str, Any] | None = None


class WalletEvent(TaxonomyEvent):
    type: WalletLogType
    wallet_id: str | None = None


class CartEvent(TaxonomyEvent):
    type: CartLogType
    cart_id: str | None = None


class VendorRequestEvent(TaxonomyEvent):
    type: VendorRequestLogType
    request_id: str
    request_number: str | None = None
    vendor_id: str | None = None
    supplier_id: str | None = None
    total: float | None = None
    request_status: str | None = None
    item_count: int | None = Field(default=None, ge=0)
    rejection_reason: str | None = None


# ── Inventory ────────────────────────────────────────────────

class InventoryEvent(EventBase):
    inventory_id: str
    inventory_name: str | None = None
    # overrides the generated action text
    action: str | None = None


class InventoryCreated(InventoryEvent):
    name: str
    quantity: float = Field(ge=0)
    unit: str | None = None
    price: float | None = None
    category: str | None = None
    location: str | None = None


class InventoryUpdated(InventoryEvent):
    previous_state: dict[str, Any]
    new_state: dict[str, Any]


class InventoryDeleted(InventoryEvent):
    reason: str | None = None
    previous_state: dict[str, Any] | None = None


class InventoryMovement(InventoryEvent):
    # free-form: unknown kinds are logged as adjustments
    movement_type: str
    quantity: float
    previous_quantity: float
    new_quantity: float
    reason: str | None = None
    reference_id: str | None = None
    from_location: str | None = None
    to_location: str | None = None


class QualityCheck(InventoryEvent):
    inspection_result: QualityCheckResult
    checked_quantity: float = Field(ge=0)
    passed_quantity: float = Field(default=0, ge=0)
    rejected_quantity: float = Field(default=0, ge=0)
    defect_types: list[str] = Field(default_factory=list)
    inspector: str | None = None
    batch_number: str | None = None
    notes: str | None = None
    inspection_date: datetime | None = None


class StockAlert(InventoryEvent):
    current_quantity: float
    threshold: float = Field(ge=0)
    unit: str | None = None


class ReorderAlert(InventoryEvent):
    current_quantity: float
    reorder_level: float = Field(ge=0)
    reorder_quantity: float | None = Field(default=None, ge=0)
    supplier_id: str | None = None


class BatchOperation(InventoryEvent):
    operation: str = Field(min_length=1)
    batch_number: str | None = None
    quantity: float | None = None
    affected_ids: list[str] = Field(default_factory=list)


class LocationChange(InventoryEvent):
    previous_location: str | None = None
    new_location: str
    reason: str | None = None


class StatusChange(InventoryEvent):
    previous_status: str | None = None
    new_status: str
    reason: str | None = None


# ── Notifications ────────────────────────────────────────────

class NotificationEvent(EventBase):
    notification_id: str
    # recipient; logged as the actor so recipient history is one filter away
    user_id: str
    notification_type: str | None = None
    category: str | None = None
    action: str | None = None


class NotificationCreated(NotificationEvent):
    title: str | None = None
    priority: str | None = None
    user_role: str | None = None


class NotificationSent(NotificationEvent):
    channels: list[str] = Field(default_factory=lambda: ["in_app"])


class NotificationDelivery(NotificationEvent):
    delivery_status: DeliveryStatus
    channel: str | None = None
    delivered_at: datetime | None = None


class NotificationInteraction(NotificationEvent):
    """Read, archive, delete and click events."""

    occurred_at: datetime | None = None
    url: str | None = None


class NotificationActionTaken(NotificationEvent):
    action_type: str = Field(min_length=1)
    occurred_at: datetime | None = None


class NotificationFailure(NotificationEvent):
    error: str = Field(min_length=1)
    channel: str | None = None
