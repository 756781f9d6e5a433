"""Read-side filtering and ordering shared by every store implementation."""

# ruff: noqa: TC003
from __future__ import annotations

import uuid
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, TypeVar

from event_approval.models.enums import RequestSort

if TYPE_CHECKING:
    from event_approval.models.decision import ApprovalDecision
    from event_approval.models.history import RequestHistoryEntry
    from event_approval.models.notification import StatusNotification
    from event_approval.models.request import EventApprovalRequest
    from event_approval.schemas.history import HistoryQuery
    from event_approval.schemas.notification import NotificationQuery
    from event_approval.schemas.request import RequestQuery

T = TypeVar("T")


def retention_cutoff(now: datetime, retention_days: int | None) -> datetime | None:
    """Oldest timestamp still visible to reads, or None for indefinite retention."""
    if retention_days is None:
        return None
    return now - timedelta(days=retention_days)


def is_retained(timestamp: datetime, cutoff: datetime | None) -> bool:
    return cutoff is None or timestamp >= cutoff


def request_timestamp(request: EventApprovalRequest) -> datetime:
    return request.submitted_at or request.created_at


def filter_requests(
    requests: Iterable[EventApprovalRequest],
    query: RequestQuery,
    cutoff: datetime | None = None,
) -> list[EventApprovalRequest]:
    return [
        r
        for r in requests
        if (query.submitter_id is None or r.submitter_id == query.submitter_id)
        and (query.status is None or r.status == query.status)
        and is_retained(request_timestamp(r), cutoff)
    ]


def sort_requests(requests: Iterable[EventApprovalRequest], sort: RequestSort) -> list[EventApprovalRequest]:
    """Order by submission time; NEWEST puts the most recent first."""
    return sorted(
        requests,
        key=lambda r: (request_timestamp(r), r.created_at),
        reverse=sort == RequestSort.NEWEST,
    )


def paginate(items: Sequence[T], offset: int, limit: int) -> list[T]:
    return list(items[offset : offset + limit])


def latest_decisions(decisions: Iterable[ApprovalDecision]) -> dict[uuid.UUID, ApprovalDecision]:
    """Most recent decision per request."""
    latest: dict[uuid.UUID, ApprovalDecision] = {}
    for decision in decisions:
        current = latest.get(decision.request_id)
        if current is None or decision.decided_at >= current.decided_at:
            latest[decision.request_id] = decision
    return latest


def filter_history(
    entries: Iterable[RequestHistoryEntry],
    query: HistoryQuery,
) -> list[RequestHistoryEntry]:
    """Apply the conjunctive history filters and return entries oldest first.

    Storage order is ignored; ties on ``occurred_at`` fall back to append sequence.
    """
    event_types = set(query.event_types) if query.event_types else None
    matched = [
        e
        for e in entries
        if (event_types is None or e.event_type in event_types)
        and (query.from_ is None or e.occurred_at >= query.from_)
        and (query.to is None or e.occurred_at <= query.to)
    ]
    return sorted(matched, key=lambda e: (e.occurred_at, e.sequence))


def filter_notifications(
    notifications: Iterable[StatusNotification],
    query: NotificationQuery,
    cutoff: datetime | None = None,
) -> list[StatusNotification]:
    """Apply notification filters and return the newest first."""
    matched = [
        n
        for n in notifications
        if (query.request_id is None or n.request_id == query.request_id)
        and (query.delivery_status is None or n.delivery_status == query.delivery_status)
        and is_retained(n.created_at, cutoff)
    ]
    return sorted(matched, key=lambda n: n.created_at, reverse=True)
