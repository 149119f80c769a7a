"""Aggregate model imports for Alembic auto-detection."""

from auditchain.models.log_entry import LogEntryRecord  # noqa: F401
