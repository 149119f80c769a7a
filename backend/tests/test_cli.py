"""CLI backfill tests against the SQLite store."""

import pytest

from auditchain import cli
from auditchain.ledger import InMemoryLedger
from auditchain.schemas.log_entry import LogEntryInput

from conftest import FailingLedger


@pytest.fixture
def cli_env(monkeypatch, sql_store, test_settings):
    """Point the CLI at the test database and settings."""
    monkeypatch.setattr(cli, "async_session", sql_store._session_factory)
    monkeypatch.setattr(cli, "settings", test_settings)
    return sql_store


async def _unmirrored(store, n: int):
    return [
        await store.create_log(LogEntryInput(
            type="order_created",
            entity_type="order",
            entity_id=f"o-{i}",
            action=f"Order o-{i} placed",
        ))
        for i in range(n)
    ]


@pytest.mark.integration
@pytest.mark.asyncio
class TestBackfill:
    async def test_mirrors_backlog(self, cli_env, monkeypatch, capsys):
        ledger = InMemoryLedger()
        monkeypatch.setattr(cli, "ledger_from_settings", lambda config=None: ledger)
        entries = await _unmirrored(cli_env, 3)

        failed = await cli.backfill(limit=10, grace_seconds=0)

        assert failed == 0
        assert len(ledger.blocks) == 3
        for e in entries:
            assert (await cli_env.get_log(e.id)).is_mirrored
        assert "Submitted 3/3 entries; 0 failed." in capsys.readouterr().out

    async def test_respects_limit(self, cli_env, monkeypatch):
        ledger = InMemoryLedger()
        monkeypatch.setattr(cli, "ledger_from_settings", lambda config=None: ledger)
        await _unmirrored(cli_env, 3)

        await cli.backfill(limit=2, grace_seconds=0)

        assert await cli_env.count_logs({"tx_hash": None}) == 1

    async def test_reports_failures(self, cli_env, monkeypatch, capsys):
        monkeypatch.setattr(cli, "ledger_from_settings", lambda config=None: FailingLedger())
        [entry] = await _unmirrored(cli_env, 1)

        failed = await cli.backfill(limit=10, grace_seconds=0)

        assert failed == 1
        assert f"FAILED {entry.id}" in capsys.readouterr().out
        assert not (await cli_env.get_log(entry.id)).is_mirrored

    async def test_grace_period_skips_fresh_entries(self, cli_env, monkeypatch, capsys):
        monkeypatch.setattr(cli, "ledger_from_settings", lambda config=None: InMemoryLedger())
        await _unmirrored(cli_env, 1)

        assert await cli.backfill(limit=10, grace_seconds=3600) == 0
        assert "No unmirrored entries." in capsys.readouterr().out

    async def test_mirror_disabled_opens_no_ledger(self, cli_env, monkeypatch, test_settings, capsys):
        test_settings.mirror_enabled = False

        def ledger_factory(config=None):
            raise AssertionError("ledger client built with the mirror disabled")

        monkeypatch.setattr(cli, "ledger_from_settings", ledger_factory)
        await _unmirrored(cli_env, 1)

        assert await cli.backfill(limit=10, grace_seconds=0) == 0
        assert "Mirror is disabled" in capsys.readouterr().out
        assert await cli_env.count_logs({"tx_hash": None}) == 1
