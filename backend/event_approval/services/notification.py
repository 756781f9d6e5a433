# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from event_approval.models.enums import (
    ActorRole,
    DeliveryStatus,
    HistoryEventType,
    NotificationChannel,
    RequestStatus,
)
from event_approval.models.notification import StatusNotification
from event_approval.schemas.notification import NotificationContent, NotificationQuery, NotificationResponse
from event_approval.services.audit import SYSTEM_ACTOR_ID, append_history
from event_approval.services.query import filter_notifications, retention_cutoff

if TYPE_CHECKING:
    from event_approval.clock import Clock
    from event_approval.models.request import EventApprovalRequest
    from event_approval.repositories.base import Repository, UnitOfWork

logger = logging.getLogger(__name__)


def build_notification_response(notification: StatusNotification) -> NotificationResponse:
    """Map a notification model to its response schema."""
    payload = notification.payload_json
    return NotificationResponse(
        id=notification.id,
        request_id=notification.request_id,
        recipient_id=notification.recipient_id,
        channel=NotificationChannel(notification.channel),
        payload=NotificationContent(
            request_id=uuid.UUID(str(payload["request_id"])),
            status=RequestStatus(payload["status"]),
            comment=payload["comment"],
        ),
        delivery_status=DeliveryStatus(notification.delivery_status),
        created_at=notification.created_at,
        sent_at=notification.sent_at,
    )


class NotificationDispatcher:
    """Creates queued status notifications for submitters.

    Moving a notification past ``queued`` belongs to the delivery channel, not here.
    """

    def __init__(
        self,
        repository: Repository,
        clock: Clock,
        channel: NotificationChannel = NotificationChannel.IN_APP,
        retention_days: int | None = None,
    ) -> None:
        self._repository = repository
        self._clock = clock
        self._channel = channel
        self._retention_days = retention_days

    async def dispatch(
        self,
        uow: UnitOfWork,
        request: EventApprovalRequest,
        comment: str,
        now: datetime,
    ) -> StatusNotification:
        """Queue a notification for the request's submitter inside the caller's unit of work."""
        notification = StatusNotification(
            id=uow.new_id(),
            request_id=request.id,
            recipient_id=request.submitter_id,
            channel=self._channel.value,
            payload_json={"request_id": str(request.id), "status": request.status, "comment": comment},
            delivery_status=DeliveryStatus.QUEUED.value,
            created_at=now,
            sent_at=None,
        )
        uow.add(notification)

        await append_history(
            uow,
            request_id=request.id,
            event_type=HistoryEventType.NOTIFICATION_SENT,
            actor_id=SYSTEM_ACTOR_ID,
            actor_role=ActorRole.SYSTEM,
            occurred_at=now,
            comment=f"Status notification {notification.id} created for {notification.recipient_id}.",
            metadata={
                "notification_id": str(notification.id),
                "channel": notification.channel,
                "delivery_status": notification.delivery_status,
            },
        )
        logger.debug("Queued %s notification %s for %s", notification.channel, notification.id, request.submitter_id)
        return notification

    async def list_notifications(
        self,
        recipient_id: str,
        query: NotificationQuery | None = None,
    ) -> list[NotificationResponse]:
        """Notifications addressed to ``recipient_id``, newest first."""
        query = query or NotificationQuery()
        cutoff = retention_cutoff(self._clock.now(), self._retention_days)
        async with self._repository.unit_of_work() as uow:
            notifications = await uow.list_notifications(recipient_id)
        return [build_notification_response(n) for n in filter_notifications(notifications, query, cutoff)]
