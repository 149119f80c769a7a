"""LogEntryRecord: immutable row in the authoritative audit store.

Records who did what, to which entity, and with what outcome. The only
column ever written after insert is the ledger coordinate pair
(`tx_hash`, `block_number`), attached once the ledger mirror confirms.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from auditchain.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LogEntryRecord(Base):
    __tablename__ = "audit_logs"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    # ── What ───────────────────────────────────────────────────
    type: Mapped[str] = mapped_column(String(100), nullable=False)
    action: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="success")
    error: Mapped[str | None] = mapped_column(Text)

    # ── Target ─────────────────────────────────────────────────
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_id: Mapped[str | None] = mapped_column(String(64))

    # ── Who ────────────────────────────────────────────────────
    performed_by: Mapped[str | None] = mapped_column(String(64))
    # snapshot of the actor at event time
    user_details: Mapped[dict | None] = mapped_column(JSON)
    ip_address: Mapped[str | None] = mapped_column(String(64))
    user_agent: Mapped[str | None] = mapped_column(Text)

    # ── Payload ────────────────────────────────────────────────
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    previous_state: Mapped[dict | None] = mapped_column(JSON)
    new_state: Mapped[dict | None] = mapped_column(JSON)
    # "metadata" is reserved on declarative classes
    extra_metadata: Mapped[dict] = mapped_column(
        "metadata", JSON, nullable=False, default=dict
    )
    execution_time: Mapped[float | None] = mapped_column(Float)

    # ── Ledger coordinates ─────────────────────────────────────
    tx_hash: Mapped[str | None] = mapped_column(String(128))
    block_number: Mapped[int | None] = mapped_column(Integer)

    # ── Timestamp ──────────────────────────────────────────────
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    __table_args__ = (
        Index("ix_audit_logs_type_timestamp", "type", "timestamp"),
        Index("ix_audit_logs_entity", "entity_id", "entity_type"),
        Index("ix_audit_logs_performed_by_timestamp", "performed_by", "timestamp"),
        Index("ix_audit_logs_status", "status"),
    )
