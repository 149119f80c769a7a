"""Ledger mirror: background copy of persisted log entries onto the ledger.

`LedgerMirror` performs one attempt for one entry. `MirrorDispatcher`
runs those attempts on a fixed pool of asyncio worker tasks fed by a
bounded queue, so the write path only ever does a non-blocking
`submit()`:

    dispatcher = MirrorDispatcher(LedgerMirror(ledger, store), concurrency=4)
    dispatcher.start()                       # in the app lifespan
    dispatcher.submit(entry.id, payload)     # from EventRecorder.log()
    await dispatcher.stop()                  # on shutdown

A failed attempt is logged as a warning and kept as a dead letter; it is
never retried here. Entries whose mirror never completed stay without
`tx_hash` in the store and can be re-submitted with the CLI `backfill`
command.
"""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone

from auditchain.ledger.base import LedgerClient
from auditchain.schemas.log_entry import LedgerReceipt, ReducedLogEntry
from auditchain.stores.base import LogStore

logger = logging.getLogger("auditchain.mirror")


@dataclass(frozen=True)
class MirrorJob:
    log_id: str
    payload: ReducedLogEntry


@dataclass(frozen=True)
class DeadLetter:
    log_id: str
    payload: ReducedLogEntry
    reason: str
    failed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class LedgerMirror:
    """Pushes one reduced entry to the ledger and records the receipt."""

    def __init__(self, ledger: LedgerClient, store: LogStore):
        self.ledger = ledger
        self.store = store

    async def mirror(self, log_id: str, payload: ReducedLogEntry) -> LedgerReceipt:
        """Write to the ledger once; ledger errors propagate to the caller.

        Attaching the coordinates to the stored entry is best-effort: the
        ledger write already happened, so a failure there is only logged.
        """
        receipt = await self.ledger.create_blockchain_log(log_id, payload)

        try:
            attached = await self.store.attach_ledger_coordinates(log_id, receipt)
        except Exception:
            logger.warning(
                "Ledger accepted %s (tx=%s) but coordinates could not be stored",
                log_id, receipt.tx_hash, exc_info=True,
            )
        else:
            if not attached:
                logger.warning("Log %s already carries ledger coordinates or is missing", log_id)
            else:
                logger.debug("Mirrored %s to block %d", log_id, receipt.block_number)
        return receipt


class MirrorDispatcher:
    """Bounded fire-and-forget queue in front of a LedgerMirror."""

    def __init__(
        self,
        mirror: LedgerMirror,
        *,
        concurrency: int = 4,
        queue_size: int = 1000,
        dead_letter_size: int = 500,
    ):
        self._mirror = mirror
        self._concurrency = max(1, concurrency)
        self._queue: asyncio.Queue[MirrorJob] = asyncio.Queue(maxsize=max(1, queue_size))
        self._dead_letters: deque[DeadLetter] = deque(maxlen=max(1, dead_letter_size))
        self._workers: list[asyncio.Task] = []
        self._in_flight = 0
        self._accepting = True
        self._completed = 0
        self._failed = 0

    # ── State ──────────────────────────────────────────────────

    @property
    def running(self) -> bool:
        return bool(self._workers)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def dead_letters(self) -> list[DeadLetter]:
        return list(self._dead_letters)

    def stats(self) -> dict:
        return {
            "running": self.running,
            "workers": len(self._workers),
            "pending": self.pending,
            "in_flight": self._in_flight,
            "completed": self._completed,
            "failed": self._failed,
            "dead_letters": len(self._dead_letters),
        }

    # ── Write side ─────────────────────────────────────────────

    def submit(self, log_id: str, payload: ReducedLogEntry) -> bool:
        """Queue one mirror attempt without waiting. Returns False if dropped."""
        job = MirrorJob(log_id=log_id, payload=payload)
        if not self._accepting:
            self._dead_letter(job, "dispatcher stopped")
            return False
        try:
            self._queue.put_nowait(job)
        except asyncio.QueueFull:
            logger.warning(
                "Mirror queue full (%d pending); dropping ledger copy of %s",
                self._queue.qsize(), log_id,
            )
            self._dead_letter(job, "queue full")
            return False
        return True

    def _dead_letter(self, job: MirrorJob, reason: str) -> None:
        self._failed += 1
        self._dead_letters.append(
            DeadLetter(log_id=job.log_id, payload=job.payload, reason=reason)
        )

    # ── Workers ────────────────────────────────────────────────

    async def _worker(self) -> None:
        while True:
            job = await self._queue.get()
            self._in_flight += 1
            try:
                await self._mirror.mirror(job.log_id, job.payload)
                self._completed += 1
            except asyncio.CancelledError:
                self._dead_letter(job, "cancelled during mirror")
                raise
            except Exception as exc:
                logger.warning("Ledger mirror failed for %s: %s", job.log_id, exc)
                self._dead_letter(job, str(exc) or type(exc).__name__)
            finally:
                self._in_flight -= 1
                self._queue.task_done()

    def start(self) -> None:
        """Launch the worker tasks (needs a running event loop)."""
        if self._workers:
            return
        self._accepting = True
        self._workers = [
            asyncio.create_task(self._worker(), name=f"ledger-mirror-{i}")
            for i in range(self._concurrency)
        ]
        logger.info("Ledger mirror started with %d workers", self._concurrency)

    async def join(self) -> None:
        """Wait until every queued job has been attempted."""
        if not self._workers and not self._queue.empty():
            raise RuntimeError("Mirror dispatcher is not running")
        await self._queue.join()

    async def stop(self, *, drain: bool = True, timeout: float | None = 5.0) -> None:
        """Stop accepting jobs, optionally drain the queue, then cancel workers.

        Jobs still queued or in flight after the drain window are dead-lettered.
        """
        self._accepting = False
        if drain and self._workers:
            try:
                await asyncio.wait_for(self._queue.join(), timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    "Mirror drain timed out with %d pending, %d in flight",
                    self._queue.qsize(), self._in_flight,
                )

        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []

        while not self._queue.empty():
            job = self._queue.get_nowait()
            self._queue.task_done()
            self._dead_letter(job, "shutdown before mirror")
        logger.info("Ledger mirror stopped (%s)", self.stats())
