"""Typed convenience constructors, one family per domain area."""

from auditchain.services.facades.commerce import (
    AuthFacade,
    CartFacade,
    OrderFacade,
    ProductFacade,
    VendorRequestFacade,
    WalletFacade,
)
from auditchain.services.facades.inventory import InventoryFacade
from auditchain.services.facades.notification import NotificationFacade

__all__ = [
    "AuthFacade",
    "CartFacade",
    "InventoryFacade",
    "NotificationFacade",
    "OrderFacade",
    "ProductFacade",
    "VendorRequestFacade",
    "WalletFacade",
]
