"""Decision workflow: transitions, optimistic concurrency, stale detection."""

from __future__ import annotations

import asyncio
import uuid
from typing import TYPE_CHECKING, Any

import pytest

from event_approval.clock import FixedClock
from event_approval.exceptions import ConflictError, NotFoundError, ValidationError
from event_approval.models.enums import (
    ActorRole,
    DecisionType,
    DeliveryStatus,
    HistoryEventType,
    RequestStatus,
)
from event_approval.schemas.decision import DecisionPayload, DecisionResponse
from event_approval.services.concurrency import ConcurrencyGuard
from event_approval.services.identity import DEMO_APPROVER, DEMO_EMPLOYEE

from .conftest import START, build_payload

if TYPE_CHECKING:
    from event_approval.repositories.memory import InMemoryRepository
    from event_approval.schemas.request import RequestResponse
    from event_approval.services.lifecycle import LifecycleService


def _decision(decision_type: str = "approved", comment: str = "ok", version: int = 1) -> dict[str, Any]:
    return {"decision_type": decision_type, "comment": comment, "expected_version": version}


@pytest.fixture
async def submitted(lifecycle: LifecycleService) -> RequestResponse:
    return await lifecycle.submit_request(DEMO_EMPLOYEE, build_payload())


async def test_approve_transitions_request_and_bumps_version(
    lifecycle: LifecycleService, submitted: RequestResponse, clock: FixedClock
) -> None:
    decided_at = clock.advance(hours=2)
    decision = await lifecycle.decide(DEMO_APPROVER, submitted.id, _decision())

    assert decision.decision_type == DecisionType.APPROVED
    assert decision.approver_id == DEMO_APPROVER.id
    assert decision.approver_display_name == DEMO_APPROVER.display_name
    assert decision.comment == "ok"
    assert decision.decided_at == decided_at

    request = await lifecycle.get_request(submitted.id)
    assert request.status == RequestStatus.APPROVED
    assert request.version == 2
    assert request.updated_at == decided_at
    assert request.submitted_at == START


async def test_approve_queues_notification_and_records_it(
    lifecycle: LifecycleService, submitted: RequestResponse
) -> None:
    await lifecycle.decide(DEMO_APPROVER, submitted.id, _decision())

    history = await lifecycle.get_history(submitted.id)
    sent = [e for e in history if e.event_type == HistoryEventType.NOTIFICATION_SENT]
    assert len(sent) == 1
    assert sent[0].actor_role == ActorRole.SYSTEM

    notifications = await lifecycle.list_notifications(DEMO_EMPLOYEE.id)
    assert len(notifications) == 1
    notification = notifications[0]
    assert notification.request_id == submitted.id
    assert notification.delivery_status == DeliveryStatus.QUEUED
    assert notification.payload.status == RequestStatus.APPROVED
    assert notification.payload.comment == "ok"
    assert sent[0].metadata is not None
    assert sent[0].metadata["notification_id"] == str(notification.id)


async def test_reject_transitions_request(lifecycle: LifecycleService, submitted: RequestResponse) -> None:
    decision = await lifecycle.decide(DEMO_APPROVER, submitted.id, _decision("rejected", "Budget exhausted"))
    assert decision.decision_type == DecisionType.REJECTED

    request = await lifecycle.get_request(submitted.id)
    assert request.status == RequestStatus.REJECTED
    assert request.version == 2

    notifications = await lifecycle.list_notifications(DEMO_EMPLOYEE.id)
    assert notifications[0].payload.status == RequestStatus.REJECTED


async def test_decide_accepts_payload_model(lifecycle: LifecycleService, submitted: RequestResponse) -> None:
    payload = DecisionPayload(decision_type=DecisionType.APPROVED, comment="ok", expected_version=1)
    decision = await lifecycle.decide(DEMO_APPROVER, submitted.id, payload)
    assert isinstance(decision, DecisionResponse)


@pytest.mark.parametrize("decision_type", ["approved", "rejected"])
async def test_decision_requires_comment(
    lifecycle: LifecycleService, submitted: RequestResponse, decision_type: str
) -> None:
    with pytest.raises(ValidationError) as exc_info:
        await lifecycle.decide(DEMO_APPROVER, submitted.id, _decision(decision_type, "   "))
    assert "comment" in exc_info.value.errors

    request = await lifecycle.get_request(submitted.id)
    assert request.status == RequestStatus.SUBMITTED
    assert request.version == 1


async def test_decision_comment_length_is_bounded(lifecycle: LifecycleService, submitted: RequestResponse) -> None:
    with pytest.raises(ValidationError):
        await lifecycle.decide(DEMO_APPROVER, submitted.id, _decision(comment="x" * 2001))


async def test_decide_unknown_request_raises_not_found(lifecycle: LifecycleService) -> None:
    with pytest.raises(NotFoundError):
        await lifecycle.decide(DEMO_APPROVER, uuid.uuid4(), _decision())


async def test_stale_version_raises_conflict_with_versions(
    lifecycle: LifecycleService, submitted: RequestResponse
) -> None:
    await lifecycle.decide(DEMO_APPROVER, submitted.id, _decision())

    with pytest.raises(ConflictError) as exc_info:
        await lifecycle.decide(DEMO_APPROVER, submitted.id, _decision("rejected", "too late", version=1))

    assert exc_info.value.expected_version == 1
    assert exc_info.value.current_version == 2
    assert exc_info.value.details == {"expected_version": 1, "current_version": 2}


async def test_stale_attempt_is_recorded_without_changing_request(
    lifecycle: LifecycleService, submitted: RequestResponse
) -> None:
    with pytest.raises(ConflictError):
        await lifecycle.decide(DEMO_APPROVER, submitted.id, _decision(version=7))

    request = await lifecycle.get_request(submitted.id)
    assert request.status == RequestStatus.SUBMITTED
    assert request.version == 1

    history = await lifecycle.get_history(submitted.id)
    assert [e.event_type for e in history] == [HistoryEventType.SUBMITTED, HistoryEventType.STALE_DETECTED]
    stale = history[-1]
    assert stale.metadata == {"expected_version": 7, "current_version": 1}
    assert await lifecycle.list_notifications(DEMO_EMPLOYEE.id) == []


async def test_terminal_request_cannot_be_decided_again(
    lifecycle: LifecycleService, submitted: RequestResponse
) -> None:
    await lifecycle.decide(DEMO_APPROVER, submitted.id, _decision())

    with pytest.raises(ConflictError) as exc_info:
        await lifecycle.decide(DEMO_APPROVER, submitted.id, _decision("rejected", "changed my mind", version=2))

    assert exc_info.value.message == "Request is no longer pending review"
    request = await lifecycle.get_request(submitted.id)
    assert request.status == RequestStatus.APPROVED
    assert request.version == 2


async def test_concurrent_decisions_on_same_version_yield_one_winner(
    lifecycle: LifecycleService, submitted: RequestResponse, repository: InMemoryRepository
) -> None:
    results = await asyncio.gather(
        lifecycle.decide(DEMO_APPROVER, submitted.id, _decision("approved", "first")),
        lifecycle.decide(DEMO_APPROVER, submitted.id, _decision("rejected", "second")),
        return_exceptions=True,
    )

    decisions = [r for r in results if isinstance(r, DecisionResponse)]
    conflicts = [r for r in results if isinstance(r, ConflictError)]
    assert len(decisions) == 1
    assert len(conflicts) == 1
    assert conflicts[0].expected_version == 1
    assert conflicts[0].current_version == 2

    request = await lifecycle.get_request(submitted.id)
    assert request.version == 2
    assert request.status == decisions[0].decision_type.value

    async with repository.unit_of_work() as uow:
        stored = await uow.list_decisions([submitted.id])
    assert len(stored) == 1


async def test_concurrent_decisions_on_different_requests_both_succeed(lifecycle: LifecycleService) -> None:
    first = await lifecycle.submit_request(DEMO_EMPLOYEE, build_payload())
    second = await lifecycle.submit_request(DEMO_EMPLOYEE, build_payload(event_name="Cloud Architecture Expo"))

    results = await asyncio.gather(
        lifecycle.decide(DEMO_APPROVER, first.id, _decision()),
        lifecycle.decide(DEMO_APPROVER, second.id, _decision("rejected", "no")),
    )

    assert {r.request_id for r in results} == {first.id, second.id}
    summary = await lifecycle.get_dashboard_summary()
    assert (summary.approved, summary.rejected, summary.pending) == (1, 1, 0)


async def test_version_alias_is_accepted(lifecycle: LifecycleService, submitted: RequestResponse) -> None:
    decision = await lifecycle.decide(
        DEMO_APPROVER, submitted.id, {"decision_type": "approved", "comment": "ok", "version": 1}
    )
    assert decision.request_id == submitted.id


async def test_failure_mid_decision_rolls_back_every_write(
    lifecycle: LifecycleService,
    submitted: RequestResponse,
    repository: InMemoryRepository,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async def _fail(*args: object, **kwargs: object) -> None:
        raise RuntimeError("notification channel down")

    monkeypatch.setattr(lifecycle.notifications, "dispatch", _fail)

    with pytest.raises(RuntimeError):
        await lifecycle.decide(DEMO_APPROVER, submitted.id, _decision())

    request = await lifecycle.get_request(submitted.id)
    assert request.status == RequestStatus.SUBMITTED
    assert request.version == 1
    history = await lifecycle.get_history(submitted.id)
    assert [e.event_type for e in history] == [HistoryEventType.SUBMITTED]
    async with repository.unit_of_work() as uow:
        assert await uow.list_decisions([submitted.id]) == []
    assert await lifecycle.list_notifications(DEMO_EMPLOYEE.id) == []


async def test_locks_are_released_after_decisions(lifecycle: LifecycleService, submitted: RequestResponse) -> None:
    for _ in range(20):
        with pytest.raises(NotFoundError):
            await lifecycle.decide(DEMO_APPROVER, uuid.uuid4(), _decision())
    await asyncio.gather(
        lifecycle.decide(DEMO_APPROVER, submitted.id, _decision()),
        lifecycle.decide(DEMO_APPROVER, submitted.id, _decision()),
        return_exceptions=True,
    )
    assert lifecycle.guard.active_locks == 0


async def test_lock_survives_while_another_caller_waits() -> None:
    guard = ConcurrencyGuard(FixedClock(START))
    request_id = uuid.uuid4()
    order: list[str] = []

    async def _hold(tag: str) -> None:
        async with guard.lock(request_id):
            order.append(tag)
            await asyncio.sleep(0)
            order.append(tag)

    await asyncio.gather(_hold("first"), _hold("second"))

    assert order == ["first", "first", "second", "second"]
    assert guard.active_locks == 0
