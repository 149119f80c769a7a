"""AuditChain: FastAPI application.

The lifespan owns the audit service: it builds the store, ledger client
and mirror dispatcher once, publishes the result on `app.state.audit`,
and drains the mirror queue on shutdown. Domain code in the same process
receives the service through `get_audit_logger` instead of importing a
global.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from auditchain.config import settings
from auditchain.database import async_session
from auditchain.middleware.exceptions import register_exception_handlers
from auditchain.routers import health, logs
from auditchain.services.audit import AuditLogger, build_audit_logger, ledger_from_settings
from auditchain.stores.sql import SqlAlchemyLogStore

logger = logging.getLogger("auditchain")


def _default_audit_logger() -> AuditLogger:
    store = SqlAlchemyLogStore(async_session)
    ledger = ledger_from_settings(settings) if settings.mirror_enabled else None
    return build_audit_logger(store, ledger, settings)


def create_app(audit: AuditLogger | None = None) -> FastAPI:
    """Build the app; pass `audit` to run against a pre-built service (tests)."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        service = audit or _default_audit_logger()
        app.state.audit = service
        service.start()
        logger.info("Audit service started (mirror=%s)", service.dispatcher is not None)
        try:
            yield
        finally:
            await service.stop()
            logger.info("Audit service stopped")

    app = FastAPI(
        title="AuditChain",
        description="Audit event log with tamper-evident ledger mirror",
        version="0.1.0",
        lifespan=lifespan,
    )

    # ── Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Routers ──────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(logs.router, prefix="/api/logs", tags=["logs"])

    return app


logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()
