"""Outcome of a `log()` call.

`Recorded` means the entry reached the authoritative store; `Failed`
means nothing was stored. Neither says anything about the ledger mirror,
which completes (or not) later.
"""

from dataclasses import dataclass
from typing import Union

from auditchain.schemas.log_entry import LogEntry


@dataclass(frozen=True)
class Recorded:
    entry: LogEntry
    mirror_scheduled: bool = False

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failed:
    reason: str
    error_type: str = "Exception"

    @property
    def ok(self) -> bool:
        return False

    @property
    def entry(self) -> None:
        return None


LogResult = Union[Recorded, Failed]
