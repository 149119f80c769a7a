"""Notification facade: lifecycle of one notification for one recipient."""

from datetime import datetime, timezone
from typing import Any, Mapping, Union

from auditchain.models.enums import (
    DeliveryStatus,
    EntityType,
    LogStatus,
    NotificationLogType,
)
from auditchain.schemas.events import (
    NotificationActionTaken,
    NotificationCreated,
    NotificationDelivery,
    NotificationFailure,
    NotificationInteraction,
    NotificationSent,
)
from auditchain.schemas.results import LogResult
from auditchain.services.facades.base import Facade, compact, guarded, parse

Event = Mapping[str, Any]


def _iso(value: datetime | None) -> str:
    return (value or datetime.now(timezone.utc)).isoformat()


class NotificationFacade(Facade):
    entity_type = EntityType.NOTIFICATION

    def _common(self, event) -> dict[str, Any]:
        return compact({
            "notificationType": event.notification_type,
            "category": event.category,
        })

    @guarded
    async def log_created(self, event: Union[NotificationCreated, Event]) -> LogResult:
        event = parse(NotificationCreated, event)
        return await self._record(
            event,
            type=NotificationLogType.CREATED.value,
            action=event.action or f"Notification created: {event.title or event.notification_id}",
            entity_id=event.notification_id,
            data={
                **self._common(event),
                **compact({
                    "title": event.title,
                    "priority": event.priority,
                    "userRole": event.user_role,
                }),
            },
        )

    @guarded
    async def log_sent(self, event: Union[NotificationSent, Event]) -> LogResult:
        event = parse(NotificationSent, event)
        return await self._record(
            event,
            type=NotificationLogType.SENT.value,
            action=event.action or f"Notification sent via {', '.join(event.channels) or 'no channel'}",
            entity_id=event.notification_id,
            data={**self._common(event), "channels": list(event.channels)},
            metadata={"channels": {channel: True for channel in event.channels}},
        )

    @guarded
    async def log_delivery(self, event: Union[NotificationDelivery, Event]) -> LogResult:
        """Record a delivery attempt; a failed delivery is a failed entry."""
        event = parse(NotificationDelivery, event)
        delivered = event.delivery_status == DeliveryStatus.DELIVERED.value
        via = f" via {event.channel}" if event.channel else ""
        return await self._record(
            event,
            type=NotificationLogType.DELIVERED.value,
            action=event.action or (
                f"Notification delivered{via}" if delivered else f"Notification delivery failed{via}"
            ),
            entity_id=event.notification_id,
            status=LogStatus.SUCCESS if delivered else LogStatus.FAILED,
            data={
                **self._common(event),
                "deliveryStatus": event.delivery_status,
                "channel": event.channel,
                "deliveredAt": _iso(event.delivered_at) if delivered else None,
            },
        )

    async def _interaction(
        self, event: NotificationInteraction, log_type: NotificationLogType, verb: str
    ) -> LogResult:
        return await self._record(
            event,
            type=log_type.value,
            action=event.action or f"Notification {verb}",
            entity_id=event.notification_id,
            data={
                **self._common(event),
                f"{verb}At": _iso(event.occurred_at),
                **compact({"url": event.url}),
            },
        )

    @guarded
    async def log_read(self, event: Union[NotificationInteraction, Event]) -> LogResult:
        event = parse(NotificationInteraction, event)
        return await self._interaction(event, NotificationLogType.READ, "read")

    @guarded
    async def log_archived(self, event: Union[NotificationInteraction, Event]) -> LogResult:
        event = parse(NotificationInteraction, event)
        return await self._interaction(event, NotificationLogType.ARCHIVED, "archived")

    @guarded
    async def log_deleted(self, event: Union[NotificationInteraction, Event]) -> LogResult:
        event = parse(NotificationInteraction, event)
        return await self._interaction(event, NotificationLogType.DELETED, "deleted")

    @guarded
    async def log_clicked(self, event: Union[NotificationInteraction, Event]) -> LogResult:
        event = parse(NotificationInteraction, event)
        return await self._interaction(event, NotificationLogType.CLICKED, "clicked")

    @guarded
    async def log_action_taken(self, event: Union[NotificationActionTaken, Event]) -> LogResult:
        event = parse(NotificationActionTaken, event)
        return await self._record(
            event,
            type=NotificationLogType.ACTION_TAKEN.value,
            action=event.action or f"Notification action taken: {event.action_type}",
            entity_id=event.notification_id,
            data={
                **self._common(event),
                "actionType": event.action_type,
                "takenAt": _iso(event.occurred_at),
            },
        )

    @guarded
    async def log_failure(self, event: Union[NotificationFailure, Event]) -> LogResult:
        event = parse(NotificationFailure, event)
        via = f" via {event.channel}" if event.channel else ""
        return await self._record(
            event,
            type=NotificationLogType.FAILED.value,
            action=event.action or f"Notification failed{via}",
            entity_id=event.notification_id,
            status=LogStatus.FAILED,
            error=event.error,
            data={**self._common(event), **compact({"channel": event.channel})},
        )
