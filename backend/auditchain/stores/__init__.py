"""Authoritative stores for log entries."""

from auditchain.stores.base import LogStore
from auditchain.stores.inmemory import InMemoryLogStore
from auditchain.stores.sql import SqlAlchemyLogStore

__all__ = [
    "LogStore",
    "InMemoryLogStore",
    "SqlAlchemyLogStore",
]
