"""Pydantic schemas for audit log entries.

Python code works with snake_case attributes; the wire shape (ledger
payloads, HTTP responses) uses the camelCase names, e.g. `entityType`,
`performedBy`, `txHash`. Both spellings are accepted on input.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from auditchain.models.enums import EntityType, LogStatus


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """JSON-safe dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class LogEntryInput(_WireModel):
    """Everything a caller supplies for a new log entry.

    Only `type`, `entity_type` and `action` are required.
    """

    type: str = Field(min_length=1, max_length=100)
    entity_type: EntityType
    action: str = Field(min_length=1)
    entity_id: str | None = None
    performed_by: str | None = None
    user_details: dict[str, Any] | None = None
    status: LogStatus = LogStatus.SUCCESS
    data: dict[str, Any] = Field(default_factory=dict)
    previous_state: dict[str, Any] | None = None
    new_state: dict[str, Any] | None = None
    error: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    execution_time: float | None = Field(default=None, ge=0)

    @field_validator("entity_id", "performed_by", mode="before")
    @classmethod
    def _coerce_identifier(cls, v: Any) -> Any:
        # ObjectIds, UUIDs and ints all end up as strings
        if v is None or isinstance(v, str):
            return v
        return str(v)

    @field_validator("data", "metadata", mode="before")
    @classmethod
    def _null_mapping(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("status", mode="before")
    @classmethod
    def _null_status(cls, v: Any) -> Any:
        return LogStatus.SUCCESS if v is None else v

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().replace("-", "_")
        return v


class LogEntry(LogEntryInput):
    """A persisted, immutable log entry."""

    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: datetime
    tx_hash: str | None = None
    block_number: int | None = None

    @property
    def is_mirrored(self) -> bool:
        return bool(self.tx_hash)


class ReducedLogEntry(_WireModel):
    """The subset of a log entry that is written to the ledger."""

    model_config = ConfigDict(frozen=True)

    type: str
    entity_type: str
    entity_id: str | None = None
    action: str
    performed_by: str | None = None
    status: str
    data: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime

    @classmethod
    def from_entry(cls, entry: LogEntry) -> "ReducedLogEntry":
        return cls(
            type=entry.type,
            entity_type=entry.entity_type,
            entity_id=entry.entity_id,
            action=entry.action,
            performed_by=entry.performed_by,
            status=entry.status,
            data=entry.data,
            timestamp=entry.timestamp,
        )


class LedgerReceipt(_WireModel):
    """Ledger coordinates returned once a payload has been committed."""

    tx_hash: str = Field(min_length=1)
    block_number: int = Field(ge=0)


class LogListResponse(BaseModel):
    items: list[dict[str, Any]]
    total: int
    limit: int
    offset: int


class DeadLetterEntry(_WireModel):
    log_id: str
    reason: str
    failed_at: datetime
    payload: dict[str, Any]
