from __future__ import annotations

from typing import TYPE_CHECKING

from event_approval.models.enums import DeliveryStatus, NotificationChannel, RequestStatus
from event_approval.schemas.notification import NotificationQuery
from event_approval.services.identity import DEMO_APPROVER, DEMO_EMPLOYEE
from event_approval.services.lifecycle import LifecycleService

from .conftest import OTHER_EMPLOYEE, build_payload

if TYPE_CHECKING:
    from event_approval.clock import FixedClock
    from event_approval.config import Settings
    from event_approval.repositories.memory import InMemoryRepository
    from event_approval.schemas.auth import ActorInfo
    from event_approval.schemas.request import RequestResponse


async def _submit_and_decide(
    lifecycle: LifecycleService, actor: ActorInfo = DEMO_EMPLOYEE, decision_type: str = "approved"
) -> RequestResponse:
    created = await lifecycle.submit_request(actor, build_payload())
    await lifecycle.decide(
        DEMO_APPROVER,
        created.id,
        {"decision_type": decision_type, "comment": f"{decision_type} by approver", "expected_version": 1},
    )
    return created


async def test_submission_alone_sends_no_notification(lifecycle: LifecycleService) -> None:
    await lifecycle.submit_request(DEMO_EMPLOYEE, build_payload())
    assert await lifecycle.list_notifications(DEMO_EMPLOYEE.id) == []


async def test_notifications_are_addressed_to_the_submitter_only(lifecycle: LifecycleService) -> None:
    await _submit_and_decide(lifecycle)
    await _submit_and_decide(lifecycle, actor=OTHER_EMPLOYEE)

    mine = await lifecycle.list_notifications(DEMO_EMPLOYEE.id)
    theirs = await lifecycle.list_notifications(OTHER_EMPLOYEE.id)
    assert len(mine) == 1
    assert len(theirs) == 1
    assert mine[0].recipient_id == DEMO_EMPLOYEE.id
    assert await lifecycle.list_notifications(DEMO_APPROVER.id) == []


async def test_notifications_newest_first(lifecycle: LifecycleService, clock: FixedClock) -> None:
    first = await _submit_and_decide(lifecycle)
    clock.advance(minutes=5)
    second = await _submit_and_decide(lifecycle, decision_type="rejected")

    notifications = await lifecycle.list_notifications(DEMO_EMPLOYEE.id)
    assert [n.request_id for n in notifications] == [second.id, first.id]
    assert notifications[0].payload.status == RequestStatus.REJECTED
    assert notifications[0].payload.comment == "rejected by approver"


async def test_notifications_filter_by_request_and_delivery_status(lifecycle: LifecycleService) -> None:
    first = await _submit_and_decide(lifecycle)
    await _submit_and_decide(lifecycle)

    by_request = await lifecycle.list_notifications(DEMO_EMPLOYEE.id, NotificationQuery(request_id=first.id))
    assert [n.request_id for n in by_request] == [first.id]

    sent = await lifecycle.list_notifications(
        DEMO_EMPLOYEE.id, NotificationQuery(delivery_status=DeliveryStatus.SENT)
    )
    assert sent == []


async def test_new_notifications_are_queued_without_sent_time(lifecycle: LifecycleService) -> None:
    await _submit_and_decide(lifecycle)
    notification = (await lifecycle.list_notifications(DEMO_EMPLOYEE.id))[0]
    assert notification.delivery_status == DeliveryStatus.QUEUED
    assert notification.sent_at is None
    assert notification.channel == NotificationChannel.IN_APP


async def test_notification_channel_is_configurable(
    settings: Settings, repository: InMemoryRepository, clock: FixedClock
) -> None:
    settings.notification_channel = NotificationChannel.EMAIL
    service = LifecycleService.from_settings(settings, repository=repository, clock=clock)
    await _submit_and_decide(service)

    notification = (await service.list_notifications(DEMO_EMPLOYEE.id))[0]
    assert notification.channel == NotificationChannel.EMAIL
