"""LedgerClient: interface of the append-only ledger that mirrors the store."""

from abc import ABC, abstractmethod

from auditchain.schemas.log_entry import LedgerReceipt, ReducedLogEntry


class LedgerClient(ABC):
    """Writes reduced log entries to the distributed ledger.

    The ledger copy is derived and eventually consistent; the
    authoritative store remains the source of truth.
    """

    @abstractmethod
    async def create_blockchain_log(
        self, log_id: str, payload: ReducedLogEntry
    ) -> LedgerReceipt:
        """Append one entry and return its ledger coordinates.

        Raises LedgerError subclasses on failure.
        """

    async def aclose(self) -> None:
        """Release network resources, if any."""
