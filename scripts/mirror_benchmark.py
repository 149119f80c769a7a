#!/usr/bin/env python
"""
Write-path benchmark for AuditChain

Measures how long `log()` takes while the ledger is slow, and how long
the mirror needs to catch up afterwards. Runs in-process against the
in-memory store; no server or database needed.

Tests:
1. log() latency with the mirror disabled (baseline)
2. log() latency with a slow ledger behind the mirror
3. Mirror drain time and dead letters

Usage:
    python scripts/mirror_benchmark.py [--entries 500] [--ledger-delay-ms 50]
"""

import argparse
import asyncio
import statistics
import time

from auditchain.config import Settings
from auditchain.ledger import InMemoryLedger
from auditchain.services.audit import build_audit_logger
from auditchain.stores import InMemoryLogStore


class DelayedLedger(InMemoryLedger):
    def __init__(self, delay_ms: float):
        super().__init__()
        self.delay = delay_ms / 1000

    async def create_blockchain_log(self, log_id, payload):
        await asyncio.sleep(self.delay)
        return await super().create_blockchain_log(log_id, payload)


def _summary(times: list[float]) -> dict:
    return {
        "avg_ms": round(statistics.mean(times), 3),
        "p50_ms": round(statistics.median(times), 3),
        "p95_ms": round(statistics.quantiles(times, n=20)[18], 3),
        "max_ms": round(max(times), 3),
    }


async def _run(entries: int, ledger, config: Settings) -> tuple[list[float], object]:
    audit = build_audit_logger(InMemoryLogStore(), ledger, config)
    audit.start()
    times = []
    for i in range(entries):
        start = time.perf_counter()
        await audit.inventory.log_movement({
            "inventory_id": f"inv-{i % 20}",
            "user_id": "supplier-bench",
            "movement_type": "restock" if i % 2 else "sale",
            "quantity": 5,
            "previous_quantity": 100,
            "new_quantity": 105,
        })
        times.append((time.perf_counter() - start) * 1000)
    return times, audit


async def main(entries: int, delay_ms: float) -> None:
    print("\n" + "=" * 70)
    print("TEST 1: log() with mirror disabled")
    print("=" * 70)
    baseline, audit = await _run(entries, None, Settings(_env_file=None, mirror_enabled=False))
    await audit.stop()
    print(f"   {_summary(baseline)}")

    print("\n" + "=" * 70)
    print(f"TEST 2: log() with a {delay_ms:g}ms ledger behind the mirror")
    print("=" * 70)
    config = Settings(_env_file=None, mirror_queue_size=max(entries, 1))
    ledger = DelayedLedger(delay_ms)
    mirrored, audit = await _run(entries, ledger, config)
    print(f"   {_summary(mirrored)}")

    print("\n" + "=" * 70)
    print("TEST 3: mirror drain")
    print("=" * 70)
    start = time.perf_counter()
    await audit.dispatcher.join()
    drain = time.perf_counter() - start
    await audit.stop()
    print(f"   Drained {len(ledger.blocks)} blocks in {drain:.2f}s")
    print(f"   Dead letters: {len(audit.dispatcher.dead_letters)}")
    print(f"   Chain verifies: {ledger.verify()}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--entries", type=int, default=500)
    parser.add_argument("--ledger-delay-ms", type=float, default=50.0)
    args = parser.parse_args()
    asyncio.run(main(args.entries, args.ledger_delay_ms))
