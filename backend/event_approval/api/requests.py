# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime

from fastapi import APIRouter, Query, status

from event_approval.api.deps import ActorDep, ApproverDep, LifecycleDep
from event_approval.models.enums import HistoryEventType, RequestSort, RequestStatus
from event_approval.schemas.decision import DecisionPayload, DecisionResponse
from event_approval.schemas.history import CommentPayload, HistoryEntryResponse, HistoryQuery
from event_approval.schemas.request import (
    DashboardSummary,
    RequestListResponse,
    RequestQuery,
    RequestResponse,
    SubmitRequestPayload,
)

requests_router = APIRouter(prefix="/requests", tags=["requests"])


@requests_router.post("", response_model=RequestResponse, status_code=status.HTTP_201_CREATED)
async def submit_request(
    payload: SubmitRequestPayload,
    lifecycle: LifecycleDep,
    actor: ActorDep,
) -> RequestResponse:
    """Submit a new event approval request."""
    return await lifecycle.submit_request(actor, payload)


@requests_router.get("", response_model=RequestListResponse)
async def list_requests(
    lifecycle: LifecycleDep,
    actor: ActorDep,
    status_filter: RequestStatus | None = Query(default=None, alias="status"),
    submitter_id: str | None = Query(default=None),
    mine: bool = Query(default=False),
    sort: RequestSort = Query(default=RequestSort.NEWEST),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> RequestListResponse:
    """List event approval requests. Employees only see their own."""
    if mine or actor.role != "approver":
        submitter_id = actor.id
    query = RequestQuery(
        submitter_id=submitter_id,
        status=status_filter,
        sort=sort,
        offset=offset,
        limit=limit,
    )
    return await lifecycle.list_requests(query)


@requests_router.get("/pending", response_model=RequestListResponse)
async def list_pending_approvals(
    lifecycle: LifecycleDep,
    approver: ApproverDep,
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> RequestListResponse:
    """Requests awaiting a decision, oldest first (approver only)."""
    return await lifecycle.list_pending_approvals(offset, limit)


@requests_router.get("/summary", response_model=DashboardSummary)
async def get_dashboard_summary(
    lifecycle: LifecycleDep,
    actor: ActorDep,
    mine: bool = Query(default=False),
) -> DashboardSummary:
    """Request counts per status. Employees only see their own."""
    own = mine or actor.role != "approver"
    return await lifecycle.get_dashboard_summary(actor.id if own else None)


@requests_router.get("/{request_id}", response_model=RequestResponse)
async def get_request(
    request_id: uuid.UUID,
    lifecycle: LifecycleDep,
    actor: ActorDep,
) -> RequestResponse:
    """Get a single event approval request."""
    return await lifecycle.get_request(request_id)


@requests_router.post("/{request_id}/decision", response_model=DecisionResponse)
async def decide(
    request_id: uuid.UUID,
    payload: DecisionPayload,
    lifecycle: LifecycleDep,
    approver: ApproverDep,
) -> DecisionResponse:
    """Approve or reject a submitted request (approver only)."""
    return await lifecycle.decide(approver, request_id, payload)


@requests_router.post(
    "/{request_id}/comments",
    response_model=HistoryEntryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    request_id: uuid.UUID,
    payload: CommentPayload,
    lifecycle: LifecycleDep,
    actor: ActorDep,
) -> HistoryEntryResponse:
    """Add a comment to the request's history."""
    return await lifecycle.add_comment(actor, request_id, payload)


@requests_router.get("/{request_id}/history", response_model=list[HistoryEntryResponse])
async def get_history(
    request_id: uuid.UUID,
    lifecycle: LifecycleDep,
    actor: ActorDep,
    event_type: list[HistoryEventType] | None = Query(default=None),
    from_: datetime | None = Query(default=None, alias="from"),
    to: datetime | None = Query(default=None),
) -> list[HistoryEntryResponse]:
    """Chronological history of a request."""
    query = HistoryQuery(event_types=event_type, from_=from_, to=to)
    return await lifecycle.get_history(request_id, query)
