"""Ledger clients for the tamper-evident mirror."""

from auditchain.ledger.base import LedgerClient
from auditchain.ledger.gateway import HttpLedgerClient
from auditchain.ledger.inmemory import InMemoryLedger

__all__ = [
    "LedgerClient",
    "HttpLedgerClient",
    "InMemoryLedger",
]
