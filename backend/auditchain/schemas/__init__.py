from auditchain.schemas.log_entry import (  # noqa: F401
    LedgerReceipt,
    LogEntry,
    LogEntryInput,
    ReducedLogEntry,
)
from auditchain.schemas.results import Failed, LogResult, Recorded  # noqa: F401
