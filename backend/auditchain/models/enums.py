"""Closed vocabularies for audit log entries.

`EntityType` and `LogStatus` are stored as plain strings; the facades are
the only writers, so the values below are the complete set the store will
ever hold.
"""

import enum


class EntityType(str, enum.Enum):
    AUTH = "auth"
    PRODUCT = "product"
    ORDER = "order"
    WALLET = "wallet"
    CART = "cart"
    INVENTORY = "inventory"
    NOTIFICATION = "notification"
    VENDOR_REQUEST = "vendor_request"


class LogStatus(str, enum.Enum):
    """Outcome of the domain action being recorded (not of the logging)."""
    SUCCESS = "success"
    FAILED = "failed"


# ── Inventory ──────────────────────────────────────────────────

class MovementType(str, enum.Enum):
    RESTOCK = "restock"
    SALE = "sale"
    PURCHASE = "purchase"
    ADJUSTMENT = "adjustment"
    TRANSFER = "transfer"
    DAMAGE = "damage"
    RESERVATION = "reservation"
    RELEASE = "release"


class InventoryLogType(str, enum.Enum):
    CREATED = "inventory_created"
    UPDATED = "inventory_updated"
    DELETED = "inventory_deleted"
    RESTOCKED = "inventory_restocked"
    CONSUMED = "inventory_consumed"
    ADJUSTED = "inventory_adjusted"
    TRANSFERRED = "inventory_transferred"
    DAMAGED = "inventory_damaged"
    RESERVED = "inventory_reserved"
    RELEASED = "inventory_released"
    QUALITY_CHECK = "inventory_quality_check"
    LOW_STOCK = "inventory_low_stock"
    OUT_OF_STOCK = "inventory_out_of_stock"
    REORDER_ALERT = "inventory_reorder_alert"
    BATCH_OPERATION = "inventory_batch_operation"
    LOCATION_CHANGED = "inventory_location_changed"
    STATUS_CHANGED = "inventory_status_changed"


# Movement taxonomy. Anything not listed here is logged as an adjustment.
MOVEMENT_LOG_TYPES: dict[MovementType, InventoryLogType] = {
    MovementType.RESTOCK: InventoryLogType.RESTOCKED,
    MovementType.SALE: InventoryLogType.CONSUMED,
    MovementType.PURCHASE: InventoryLogType.CONSUMED,
    MovementType.ADJUSTMENT: InventoryLogType.ADJUSTED,
    MovementType.TRANSFER: InventoryLogType.TRANSFERRED,
    MovementType.DAMAGE: InventoryLogType.DAMAGED,
    MovementType.RESERVATION: InventoryLogType.RESERVED,
    MovementType.RELEASE: InventoryLogType.RELEASED,
}

FALLBACK_MOVEMENT_LOG_TYPE = InventoryLogType.ADJUSTED

# Every log type a stock movement can produce, for grouped queries.
INVENTORY_MOVEMENT_TYPES: tuple[str, ...] = tuple(
    sorted({t.value for t in MOVEMENT_LOG_TYPES.values()})
)


def movement_log_type(movement_type: str) -> InventoryLogType:
    """Map a movement kind to its log type, falling back to an adjustment."""
    try:
        return MOVEMENT_LOG_TYPES[MovementType(movement_type)]
    except ValueError:
        return FALLBACK_MOVEMENT_LOG_TYPE


class QualityCheckResult(str, enum.Enum):
    PASSED = "passed"
    FAILED = "failed"
    CONDITIONAL = "conditional"


# ── Notifications ──────────────────────────────────────────────

class NotificationLogType(str, enum.Enum):
    CREATED = "notification_created"
    SENT = "notification_sent"
    DELIVERED = "notification_delivered"
    READ = "notification_read"
    ARCHIVED = "notification_archived"
    DELETED = "notification_deleted"
    CLICKED = "notification_clicked"
    ACTION_TAKEN = "notification_action_taken"
    FAILED = "notification_failed"


class DeliveryStatus(str, enum.Enum):
    DELIVERED = "delivered"
    FAILED = "failed"


# ── Other domain areas ─────────────────────────────────────────

class AuthLogType(str, enum.Enum):
    USER_REGISTERED = "user_registered"
    USER_LOGIN = "user_login"
    USER_LOGOUT = "user_logout"
    LOGIN_FAILED = "login_failed"
    EMAIL_VERIFIED = "email_verified"
    PASSWORD_CHANGED = "password_changed"
    PASSWORD_RESET = "password_reset"


class ProductLogType(str, enum.Enum):
    CREATED = "product_created"
    UPDATED = "product_updated"
    DELETED = "product_deleted"
    TRANSFERRED = "product_transferred"
    VERIFIED = "product_verified"


class OrderLogType(str, enum.Enum):
    CREATED = "order_created"
    UPDATED = "order_updated"
    STATUS_CHANGED = "order_status_changed"
    CANCELLED = "order_cancelled"
    DELIVERED = "order_delivered"
    PAYMENT_PROCESSED = "payment_processed"
    PAYMENT_FAILED = "payment_failed"
    REFUND_PROCESSED = "refund_processed"
    REFUND_FAILED = "refund_failed"


class WalletLogType(str, enum.Enum):
    CREATED = "wallet_created"
    FUNDS_ADDED = "wallet_funds_added"
    TRANSFER = "wallet_transfer"
    TRANSACTION = "wallet_transaction"
    FROZEN = "wallet_frozen"
    UNFROZEN = "wallet_unfrozen"
    PAYMENT_PROCESSED = "payment_processed"
    PAYMENT_FAILED = "payment_failed"
    REFUND_PROCESSED = "refund_processed"
    REFUND_FAILED = "refund_failed"


class CartLogType(str, enum.Enum):
    ITEM_ADDED = "cart_item_added"
    ITEM_UPDATED = "cart_item_updated"
    ITEM_REMOVED = "cart_item_removed"
    CLEARED = "cart_cleared"
    CHECKED_OUT = "cart_checked_out"


class VendorRequestLogType(str, enum.Enum):
    CREATED = "vendor_request_created"
    APPROVED = "vendor_request_approved"
    REJECTED = "vendor_request_rejected"
    CANCELLED = "vendor_request_cancelled"
    COMPLETED = "vendor_request_completed"
