"""Pytest configuration and fixtures for AuditChain tests.

Provides in-memory and SQLite-backed stores, ledger doubles, a composed
audit service and an HTTP client over the app.
"""

import asyncio
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

from auditchain.config import Settings
from auditchain.database import Base, make_engine, make_session_factory
from auditchain.ledger import InMemoryLedger
from auditchain.main import create_app
from auditchain.middleware.exceptions import LedgerUnavailableError, LogStoreError
from auditchain.schemas.log_entry import LedgerReceipt, ReducedLogEntry
from auditchain.services.audit import AuditLogger, build_audit_logger
from auditchain.stores import InMemoryLogStore, SqlAlchemyLogStore

import auditchain.models  # noqa: F401 (registers audit_logs on Base.metadata)


# ── Ledger doubles ───────────────────────────────────────────────

class SlowLedger(InMemoryLedger):
    """Commits like InMemoryLedger, but only after a delay."""

    def __init__(self, delay: float = 0.5):
        super().__init__()
        self.delay = delay
        self.calls = 0

    async def create_blockchain_log(self, log_id: str, payload: ReducedLogEntry) -> LedgerReceipt:
        self.calls += 1
        await asyncio.sleep(self.delay)
        return await super().create_blockchain_log(log_id, payload)


class FailingLedger(InMemoryLedger):
    """Rejects every write."""

    def __init__(self):
        super().__init__()
        self.calls = 0

    async def create_blockchain_log(self, log_id: str, payload: ReducedLogEntry) -> LedgerReceipt:
        self.calls += 1
        raise LedgerUnavailableError("ledger node unreachable")


class FailingStore(InMemoryLogStore):
    """Refuses every write; reads behave normally."""

    async def create_log(self, entry):
        raise LogStoreError("connection refused")


# ── Settings ─────────────────────────────────────────────────────

@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        environment="test",
        mirror_enabled=True,
        mirror_concurrency=2,
        mirror_queue_size=100,
        dead_letter_size=50,
        mirror_drain_timeout_seconds=2.0,
    )


# ── Stores and ledgers ───────────────────────────────────────────

@pytest.fixture
def store() -> InMemoryLogStore:
    return InMemoryLogStore()


@pytest.fixture
def ledger() -> InMemoryLedger:
    return InMemoryLedger()


@pytest_asyncio.fixture
async def sql_store() -> AsyncGenerator[SqlAlchemyLogStore, None]:
    """SqlAlchemyLogStore over a fresh in-memory SQLite database."""
    engine = make_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield SqlAlchemyLogStore(make_session_factory(engine))

    await engine.dispose()


# ── Composed service ─────────────────────────────────────────────

@pytest_asyncio.fixture
async def audit(store, ledger, test_settings) -> AsyncGenerator[AuditLogger, None]:
    """Started audit service over the in-memory store and ledger."""
    service = build_audit_logger(store, ledger, test_settings)
    service.start()
    yield service
    await service.stop()


@pytest_asyncio.fixture
async def client(audit: AuditLogger) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client over the app, wired to the `audit` fixture.

    ASGITransport does not run the lifespan, so the service is published
    on app.state directly.
    """
    app = create_app(audit)
    app.state.audit = audit
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


# ── Test Markers ─────────────────────────────────────────────────

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "api: HTTP API tests")
    config.addinivalue_line("markers", "slow: Slow tests")
