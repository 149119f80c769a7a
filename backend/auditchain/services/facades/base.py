"""Shared plumbing for the domain facades."""

import functools
import logging
from typing import Any, Mapping, TypeVar, Union

from pydantic import BaseModel, ValidationError

from auditchain.models.enums import EntityType
from auditchain.schemas.events import EventBase
from auditchain.schemas.log_entry import LogEntryInput
from auditchain.schemas.results import Failed, LogResult
from auditchain.services.recorder import EventRecorder

logger = logging.getLogger("auditchain.facades")

E = TypeVar("E", bound=BaseModel)


def compact(values: Mapping[str, Any]) -> dict[str, Any]:
    """Drop keys whose value is None."""
    return {k: v for k, v in values.items() if v is not None}


def parse(model: type[E], event: Union[E, Mapping[str, Any]]) -> E:
    if isinstance(event, model):
        return event
    return model.model_validate(dict(event))


def guarded(method):
    """Turn any failure while building an entry into a `Failed` result.

    The recorder already never raises; this extends the same guarantee to
    the mapping code in front of it (bad mappings, unexpected payloads).
    """

    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs) -> LogResult:
        try:
            return await method(self, *args, **kwargs)
        except ValidationError as exc:
            logger.warning("Rejected %s.%s event: %s", type(self).__name__, method.__name__, exc)
            return Failed(reason=str(exc), error_type="ValidationError")
        except Exception as exc:
            logger.error(
                "Logger error in %s.%s: %s", type(self).__name__, method.__name__, exc,
                exc_info=True,
            )
            return Failed(reason=str(exc) or type(exc).__name__, error_type=type(exc).__name__)

    return wrapper


class Facade:
    """Base class: knows its entity type and how to hand off to the recorder."""

    entity_type: EntityType

    def __init__(self, recorder: EventRecorder):
        self.recorder = recorder

    async def _record(
        self,
        event: EventBase,
        *,
        type: str,
        action: str,
        entity_id: str | None,
        performed_by: str | None = None,
        data: Mapping[str, Any] | None = None,
        **fields: Any,
    ) -> LogResult:
        # caller-supplied data wins over the generated keys
        merged = {**(data or {}), **event.data}
        entry = LogEntryInput(
            type=type,
            entity_type=self.entity_type,
            entity_id=entity_id,
            action=action,
            performed_by=performed_by if performed_by is not None else event.user_id,
            user_details=event.user_details,
            status=fields.pop("status", event.status),
            data=merged,
            error=fields.pop("error", event.error),
            metadata={**event.metadata, **fields.pop("metadata", {})},
            execution_time=event.execution_time,
            **fields,
        )
        return await self.recorder.log(entry)
