"""AuditLogger: the composed audit service handed to domain code.

There is no module-level instance: the application builds one in its
lifespan (see `main.py`) and exposes it through `app.state`; tests build
their own around in-memory stores and ledgers.

    audit = build_audit_logger(store, ledger)
    audit.start()
    await audit.inventory.log_movement({...})
    await audit.query.get_inventory_movements(inventory_id)
    await audit.stop()
"""

import logging
from typing import Any, Mapping, Union

from auditchain.config import Settings, settings as default_settings
from auditchain.ledger import HttpLedgerClient, InMemoryLedger, LedgerClient
from auditchain.schemas.log_entry import LogEntryInput
from auditchain.schemas.results import LogResult
from auditchain.services.facades import (
    AuthFacade,
    CartFacade,
    InventoryFacade,
    NotificationFacade,
    OrderFacade,
    ProductFacade,
    VendorRequestFacade,
    WalletFacade,
)
from auditchain.services.mirror import LedgerMirror, MirrorDispatcher
from auditchain.services.query import QueryService
from auditchain.services.recorder import EventRecorder
from auditchain.stores.base import LogStore

logger = logging.getLogger(__name__)


class AuditLogger:
    def __init__(
        self,
        store: LogStore,
        ledger: LedgerClient | None = None,
        dispatcher: MirrorDispatcher | None = None,
        *,
        drain_timeout: float = 5.0,
    ):
        self.store = store
        self.ledger = ledger
        self.dispatcher = dispatcher
        self._drain_timeout = drain_timeout

        self.recorder = EventRecorder(store, dispatcher)
        self.query = QueryService(store)

        self.auth = AuthFacade(self.recorder)
        self.product = ProductFacade(self.recorder)
        self.order = OrderFacade(self.recorder)
        self.wallet = WalletFacade(self.recorder)
        self.cart = CartFacade(self.recorder)
        self.inventory = InventoryFacade(self.recorder)
        self.notification = NotificationFacade(self.recorder)
        self.vendor_request = VendorRequestFacade(self.recorder)

    async def log(self, entry: Union[LogEntryInput, Mapping[str, Any]]) -> LogResult:
        return await self.recorder.log(entry)

    def start(self) -> None:
        if self.dispatcher is not None:
            self.dispatcher.start()

    async def stop(self) -> None:
        if self.dispatcher is not None:
            await self.dispatcher.stop(timeout=self._drain_timeout)
        if self.ledger is not None:
            await self.ledger.aclose()


def build_audit_logger(
    store: LogStore,
    ledger: LedgerClient | None,
    config: Settings | None = None,
) -> AuditLogger:
    """Wire store, ledger and dispatcher according to settings.

    Passing `ledger=None` (or disabling the mirror in settings) gives a
    store-only logger: entries are recorded but never mirrored.
    """
    config = config or default_settings
    dispatcher = None
    if ledger is not None and config.mirror_enabled:
        dispatcher = MirrorDispatcher(
            LedgerMirror(ledger, store),
            concurrency=config.mirror_concurrency,
            queue_size=config.mirror_queue_size,
            dead_letter_size=config.dead_letter_size,
        )
    return AuditLogger(
        store,
        ledger,
        dispatcher,
        drain_timeout=config.mirror_drain_timeout_seconds,
    )


def ledger_from_settings(config: Settings | None = None) -> LedgerClient:
    """HTTP gateway client when `ledger_url` is set, else the in-process ledger."""
    config = config or default_settings
    if config.ledger_url:
        return HttpLedgerClient(
            base_url=config.ledger_url,
            api_key=config.ledger_api_key,
            timeout_seconds=config.ledger_timeout_seconds,
        )
    logger.warning("No ledger_url configured; mirroring to the in-process ledger")
    return InMemoryLedger()
