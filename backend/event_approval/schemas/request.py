# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    PlainSerializer,
    TypeAdapter,
    ValidationInfo,
    field_validator,
)
from pydantic import ValidationError as PydanticValidationError

from event_approval.models.enums import RequestSort, RequestStatus, RoleType, TransportationMode

Money = Annotated[
    Decimal,
    Field(ge=0, max_digits=12, decimal_places=2),
    PlainSerializer(float, return_type=float, when_used="json"),
]

COST_COMPONENTS = ("registration", "travel", "hotels", "meals", "other")

_url_adapter: TypeAdapter[HttpUrl] = TypeAdapter(HttpUrl)

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class CostEstimate(BaseModel):
    """Estimated cost of attending, broken down by category."""

    model_config = ConfigDict(str_strip_whitespace=True)

    registration: Money
    travel: Money
    hotels: Money
    meals: Money
    other: Money
    currency_code: str = Field(pattern=r"^[A-Za-z]{3}$")
    total: Money

    @field_validator("currency_code")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        return value.upper()

    @field_validator("total")
    @classmethod
    def _validate_total(cls, value: Decimal, info: ValidationInfo) -> Decimal:
        components = [info.data.get(name) for name in COST_COMPONENTS]
        if any(component is None for component in components):
            # A component already failed validation; its own error is reported.
            return value
        subtotal = sum(components, Decimal(0))  # type: ignore[arg-type]
        if subtotal <= 0:
            msg = "total must be greater than zero: at least one cost category must be greater than zero"
            raise ValueError(msg)
        if value != subtotal:
            msg = f"total must equal the sum of the cost categories ({subtotal})"
            raise ValueError(msg)
        return value


class SubmitRequestPayload(BaseModel):
    """Request body for submitting a new event approval request."""

    model_config = ConfigDict(str_strip_whitespace=True)

    event_name: str = Field(min_length=3, max_length=200)
    event_website: str = Field(max_length=2048)
    role: RoleType
    transportation_mode: TransportationMode
    origin: str = Field(min_length=1, max_length=150)
    destination: str = Field(min_length=1, max_length=150)
    cost_estimate: CostEstimate

    @field_validator("event_website")
    @classmethod
    def _validate_website(cls, value: str) -> str:
        try:
            url = _url_adapter.validate_python(value)
        except PydanticValidationError:
            msg = "Event website must be a valid URL."
            raise ValueError(msg) from None
        if url.scheme != "https":
            msg = "Event website must use https."
            raise ValueError(msg)
        return value


class RequestQuery(BaseModel):
    """Filters, ordering and pagination for request listings."""

    submitter_id: str | None = None
    status: RequestStatus | None = None
    sort: RequestSort = RequestSort.NEWEST
    offset: int = Field(default=0, ge=0)
    limit: int = Field(default=50, ge=1, le=100)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class RequestResponse(BaseModel):
    """Response schema for a single event approval request."""

    id: uuid.UUID
    request_number: str
    submitter_id: str
    submitter_display_name: str
    event_name: str
    event_website: str
    role: RoleType
    transportation_mode: TransportationMode
    origin: str
    destination: str
    cost_estimate: CostEstimate
    status: RequestStatus
    created_at: datetime
    updated_at: datetime
    submitted_at: datetime | None
    version: int


class RequestSummary(BaseModel):
    """List projection of a request."""

    id: uuid.UUID
    request_number: str
    event_name: str
    role: RoleType
    status: RequestStatus
    submitted_at: datetime | None
    destination: str
    total_cost: Money
    currency_code: str
    submitter_display_name: str
    latest_comment: str | None = None


class RequestListResponse(BaseModel):
    """Paginated list of request summaries."""

    items: list[RequestSummary]
    total: int


class DashboardSummary(BaseModel):
    """Request counts per lifecycle bucket."""

    total: int
    pending: int
    approved: int
    rejected: int
