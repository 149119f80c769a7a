"""Event recorder: the single write path for audit log entries.

`log()` persists an entry to the authoritative store and hands a reduced
copy to the mirror dispatcher without waiting for the ledger. It never
raises: logging is a side effect of domain operations and must not be
able to abort them. Callers get a `Recorded` or `Failed` result instead.
"""

import logging
import time
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Union

from auditchain.schemas.log_entry import LogEntry, LogEntryInput, ReducedLogEntry
from auditchain.schemas.results import Failed, LogResult, Recorded
from auditchain.services.mirror import MirrorDispatcher
from auditchain.stores.base import LogStore

logger = logging.getLogger("auditchain.recorder")


class Stopwatch:
    """Elapsed wall time in milliseconds, for `execution_time`."""

    def __init__(self) -> None:
        self._start = time.perf_counter()
        self._end: float | None = None

    def stop(self) -> float:
        self._end = time.perf_counter()
        return self.elapsed_ms

    @property
    def elapsed_ms(self) -> float:
        end = self._end if self._end is not None else time.perf_counter()
        return round((end - self._start) * 1000, 3)


class EventRecorder:
    def __init__(self, store: LogStore, dispatcher: MirrorDispatcher | None = None):
        self.store = store
        self.dispatcher = dispatcher

    @staticmethod
    @contextmanager
    def timed() -> Iterator[Stopwatch]:
        """Measure a block of work.

        Usage:
            with EventRecorder.timed() as sw:
                await do_the_work()
            await recorder.log({..., "execution_time": sw.elapsed_ms})
        """
        sw = Stopwatch()
        try:
            yield sw
        finally:
            sw.stop()

    async def log(self, entry: Union[LogEntryInput, Mapping[str, Any]]) -> LogResult:
        """Persist one entry and schedule its ledger copy."""
        try:
            if not isinstance(entry, LogEntryInput):
                entry = LogEntryInput.model_validate(
                    dict(entry) if isinstance(entry, Mapping) else entry
                )
        except (TypeError, ValueError) as exc:
            logger.warning("Rejected invalid log entry: %s", exc)
            return Failed(reason=str(exc), error_type=type(exc).__name__)

        try:
            stored = await self.store.create_log(entry)
        except Exception as exc:
            logger.error(
                "Logger error: could not persist %s (%s): %s",
                entry.type, entry.action, exc, exc_info=True,
            )
            return Failed(reason=str(exc) or type(exc).__name__, error_type=type(exc).__name__)

        logger.info("Log created: %s - %s", stored.type, stored.action)
        return Recorded(entry=stored, mirror_scheduled=self._schedule_mirror(stored))

    def _schedule_mirror(self, stored: LogEntry) -> bool:
        if self.dispatcher is None:
            return False
        if not self.dispatcher.running:
            # the entry stays without coordinates until `backfill` picks it up
            logger.warning("Mirror dispatcher not started; %s stays unmirrored", stored.id)
            return False
        try:
            return self.dispatcher.submit(stored.id, ReducedLogEntry.from_entry(stored))
        except Exception as exc:
            logger.warning("Could not schedule ledger mirror for %s: %s", stored.id, exc)
            return False
