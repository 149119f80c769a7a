"""Management CLI for the audit store.

Usage:
    python -m auditchain.cli init-db               # Create the audit_logs table
    python -m auditchain.cli unmirrored            # Count/list entries without ledger coordinates
    python -m auditchain.cli backfill --limit 500  # Re-submit unmirrored entries to the ledger once

`backfill` is the only reconciliation path: nothing retries a failed
mirror automatically.
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timedelta, timezone

from auditchain.config import settings
from auditchain.database import Base, engine, async_session
from auditchain.schemas.log_entry import ReducedLogEntry
from auditchain.services.audit import build_audit_logger, ledger_from_settings
from auditchain.stores.sql import SqlAlchemyLogStore


async def init_db() -> None:
    import auditchain.models  # noqa: F401 (registers tables on Base.metadata)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print("audit_logs table ready.")


def _cutoff(grace_seconds: int) -> datetime:
    # skip entries whose first mirror attempt may still be in flight
    return datetime.now(timezone.utc) - timedelta(seconds=grace_seconds)


async def list_unmirrored(limit: int, grace_seconds: int) -> None:
    store = SqlAlchemyLogStore(async_session)
    filters = {"tx_hash": None, "timestamp": {"$lt": _cutoff(grace_seconds)}}
    total = await store.count_logs(filters)
    entries = await store.get_logs(filters, limit=limit, newest_first=False)
    for e in entries:
        print(f"  {e.timestamp.isoformat()}  {e.id}  {e.type}  {e.action}")
    print(f"\n{total} unmirrored entr{'y' if total == 1 else 'ies'}")


async def backfill(limit: int, grace_seconds: int) -> int:
    """Push unmirrored entries through the normal dispatcher once.

    Returns the number of entries that still failed.
    """
    if not settings.mirror_enabled:
        print("Mirror is disabled (MIRROR_ENABLED=false); nothing to do.")
        return 0

    store = SqlAlchemyLogStore(async_session)
    audit = build_audit_logger(store, ledger_from_settings(settings), settings)

    entries = await audit.query.get_unmirrored_logs(
        older_than=_cutoff(grace_seconds), limit=limit
    )
    if not entries:
        print("No unmirrored entries.")
        await audit.stop()
        return 0

    audit.start()
    submitted = sum(
        audit.dispatcher.submit(e.id, ReducedLogEntry.from_entry(e)) for e in entries
    )
    await audit.dispatcher.join()
    failed = len(audit.dispatcher.dead_letters)
    await audit.stop()

    print(f"Submitted {submitted}/{len(entries)} entries; {failed} failed.")
    for d in audit.dispatcher.dead_letters:
        print(f"  FAILED {d.log_id}: {d.reason}")
    return failed


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="python -m auditchain.cli")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="create the audit_logs table")

    for name in ("unmirrored", "backfill"):
        p = sub.add_parser(name)
        p.add_argument("--limit", type=int, default=100)
        p.add_argument(
            "--grace-seconds", type=int, default=60,
            help="ignore entries newer than this (their first mirror may be pending)",
        )

    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))

    if args.command == "init-db":
        asyncio.run(init_db())
    elif args.command == "unmirrored":
        asyncio.run(list_unmirrored(args.limit, args.grace_seconds))
    elif args.command == "backfill":
        return 1 if asyncio.run(backfill(args.limit, args.grace_seconds)) else 0
    return 0


if __name__ == "__main__":
    sys.exit(main())
