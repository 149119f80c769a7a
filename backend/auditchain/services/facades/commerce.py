"""Facades for auth, product, order, wallet, cart and vendor-request events.

These domains pick their own type tag from a closed taxonomy and write
their own action text; the facade only routes ids and states into place.
"""

from typing import Any, Mapping, Union

from starlette.requests import Request

from auditchain.models.enums import EntityType
from auditchain.schemas.events import (
    AuthEvent,
    CartEvent,
    OrderEvent,
    ProductEvent,
    VendorRequestEvent,
    WalletEvent,
)
from auditchain.schemas.results import LogResult
from auditchain.services.facades.base import Facade, compact, guarded, parse


class AuthFacade(Facade):
    entity_type = EntityType.AUTH

    @guarded
    async def log_auth(
        self,
        event: Union[AuthEvent, Mapping[str, Any]],
        request: Request | None = None,
    ) -> LogResult:
        """Record an authentication event.

        Provenance comes from the request when one is given, unless the
        event already names it.
        """
        event = parse(AuthEvent, event)
        ip_address = event.ip_address
        user_agent = event.user_agent
        if request is not None:
            if ip_address is None and request.client is not None:
                ip_address = request.client.host
            if user_agent is None:
                user_agent = request.headers.get("user-agent")

        return await self._record(
            event,
            type=event.type,
            action=event.action,
            entity_id=event.user_id,
            ip_address=ip_address,
            user_agent=user_agent,
        )


class ProductFacade(Facade):
    entity_type = EntityType.PRODUCT

    @guarded
    async def log_product(self, event: Union[ProductEvent, Mapping[str, Any]]) -> LogResult:
        event = parse(ProductEvent, event)
        return await self._record(
            event,
            type=event.type,
            action=event.action,
            entity_id=event.product_id,
            previous_state=event.previous_state,
            new_state=event.new_state,
        )


class OrderFacade(Facade):
    entity_type = EntityType.ORDER

    @guarded
    async def log_order(self, event: Union[OrderEvent, Mapping[str, Any]]) -> LogResult:
        event = parse(OrderEvent, event)
        return await self._record(
            event,
            type=event.type,
            action=event.action,
            entity_id=event.order_id,
            previous_state=event.previous_state,
            new_state=event.new_state,
        )


class WalletFacade(Facade):
    entity_type = EntityType.WALLET

    @guarded
    async def log_wallet(self, event: Union[WalletEvent, Mapping[str, Any]]) -> LogResult:
        event = parse(WalletEvent, event)
        return await self._record(
            event,
            type=event.type,
            action=event.action,
            entity_id=event.wallet_id,
        )


class CartFacade(Facade):
    entity_type = EntityType.CART

    @guarded
    async def log_cart(self, event: Union[CartEvent, Mapping[str, Any]]) -> LogResult:
        event = parse(CartEvent, event)
        return await self._record(
            event,
            type=event.type,
            action=event.action,
            entity_id=event.cart_id,
        )


class VendorRequestFacade(Facade):
    entity_type = EntityType.VENDOR_REQUEST

    @guarded
    async def log_vendor_request(
        self, event: Union[VendorRequestEvent, Mapping[str, Any]]
    ) -> LogResult:
        event = parse(VendorRequestEvent, event)
        actor = event.user_id or event.vendor_id or event.supplier_id
        return await self._record(
            event,
            type=event.type,
            action=event.action,
            entity_id=event.request_id,
            performed_by=actor,
            data=compact({
                "requestNumber": event.request_number,
                "vendorId": event.vendor_id,
                "supplierId": event.supplier_id,
                "total": event.total,
                "requestStatus": event.request_status,
                "itemCount": event.item_count,
                "rejectionReason": event.rejection_reason,
            }),
        )
