# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Any

from event_approval.exceptions import ConflictError
from event_approval.models.decision import ApprovalDecision
from event_approval.models.enums import TERMINAL_STATUSES, ActorRole, DecisionType, HistoryEventType, RequestStatus
from event_approval.schemas.decision import DecisionPayload, DecisionResponse
from event_approval.services.audit import append_history
from event_approval.services.base import get_request_or_404, validate_payload
from event_approval.services.query import retention_cutoff

if TYPE_CHECKING:
    from collections.abc import Mapping

    from event_approval.clock import Clock
    from event_approval.repositories.base import Repository
    from event_approval.schemas.auth import ActorInfo
    from event_approval.services.concurrency import ConcurrencyGuard
    from event_approval.services.notification import NotificationDispatcher

logger = logging.getLogger(__name__)

# submitted -> approved | rejected. Nothing leaves approved, rejected or draft.
ALLOWED_TRANSITIONS: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.SUBMITTED: TERMINAL_STATUSES,
}


def build_decision_response(decision: ApprovalDecision) -> DecisionResponse:
    """Map a decision model to its response schema."""
    return DecisionResponse(
        id=decision.id,
        request_id=decision.request_id,
        approver_id=decision.approver_id,
        approver_display_name=decision.approver_display_name,
        decision_type=DecisionType(decision.decision_type),
        comment=decision.comment,
        decided_at=decision.decided_at,
    )


class DecisionEngine:
    """Applies approve/reject decisions under optimistic concurrency."""

    def __init__(
        self,
        repository: Repository,
        clock: Clock,
        guard: ConcurrencyGuard,
        dispatcher: NotificationDispatcher,
        retention_days: int | None = None,
    ) -> None:
        self._repository = repository
        self._clock = clock
        self._guard = guard
        self._dispatcher = dispatcher
        self._retention_days = retention_days

    async def decide(
        self,
        actor: ActorInfo,
        request_id: uuid.UUID,
        payload: DecisionPayload | Mapping[str, Any],
    ) -> DecisionResponse:
        """Approve or reject a submitted request.

        1. Validate payload (comment required for both outcomes).
        2. Lock and load the request (hidden once past retention).
        3. Version check; a stale version is recorded and raises ConflictError.
        4. Reject anything not pending review.
        5. Record the decision.
        6. Transition status, bump version.
        7. Append the decision history entry.
        8. Queue the submitter notification.
        9. Commit 5-8 together.
        """
        data = validate_payload(DecisionPayload, payload, "Decision payload failed validation")
        target = RequestStatus(data.decision_type.value)

        cutoff = retention_cutoff(self._clock.now(), self._retention_days)
        async with self._guard.lock(request_id), self._repository.unit_of_work() as uow:
            request = await get_request_or_404(uow, request_id, for_update=True, cutoff=cutoff)
            await self._guard.check_version(uow, request, data.expected_version)

            if target not in ALLOWED_TRANSITIONS.get(RequestStatus(request.status), frozenset()):
                raise ConflictError("Request is no longer pending review")

            now = self._clock.now()
            decision = ApprovalDecision(
                id=uow.new_id(),
                request_id=request.id,
                approver_id=actor.id,
                approver_display_name=actor.display_name,
                decision_type=data.decision_type.value,
                comment=data.comment,
                decided_at=now,
            )
            uow.add(decision)

            request.status = target.value
            request.version += 1
            request.updated_at = now
            uow.add(request)

            await append_history(
                uow,
                request_id=request.id,
                event_type=HistoryEventType(target.value),
                actor_id=actor.id,
                actor_role=ActorRole.APPROVER,
                occurred_at=now,
                comment=data.comment,
                metadata={"version": request.version},
            )
            await self._dispatcher.dispatch(uow, request, data.comment, now)
            await uow.commit()

        logger.info(
            "Request %s %s by %s (version %d)", request.request_number, target.value, actor.id, request.version
        )
        return build_decision_response(decision)
