"""Unit tests for request, decision and history schemas."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

import pytest
from pydantic import ValidationError

from event_approval.exceptions import field_errors
from event_approval.models.enums import DecisionType, HistoryEventType
from event_approval.schemas.decision import DecisionPayload
from event_approval.schemas.history import CommentPayload, HistoryQuery
from event_approval.schemas.request import CostEstimate, RequestQuery, SubmitRequestPayload

from .conftest import build_payload


def _cost(**overrides: Any) -> dict[str, Any]:
    cost: dict[str, Any] = {
        "registration": 350,
        "travel": 200,
        "hotels": 420,
        "meals": 150,
        "other": 80,
        "currency_code": "EUR",
        "total": 1200,
    }
    cost.update(overrides)
    return cost


# ---------------------------------------------------------------------------
# CostEstimate
# ---------------------------------------------------------------------------


def test_cost_estimate_valid() -> None:
    cost = CostEstimate.model_validate(_cost())
    assert cost.total == Decimal("1200")
    assert cost.currency_code == "EUR"


def test_cost_estimate_accepts_cents() -> None:
    cost = CostEstimate.model_validate(_cost(other="80.25", total="1200.25"))
    assert cost.total == Decimal("1200.25")


def test_cost_estimate_rejects_negative_component() -> None:
    with pytest.raises(ValidationError) as exc_info:
        CostEstimate.model_validate(_cost(meals=-1, total=1049))
    assert "meals" in field_errors(exc_info.value.errors())


def test_cost_estimate_rejects_fractional_cents() -> None:
    with pytest.raises(ValidationError):
        CostEstimate.model_validate(_cost(other="80.001", total="1200.001"))


def test_cost_estimate_total_must_match_sum() -> None:
    with pytest.raises(ValidationError) as exc_info:
        CostEstimate.model_validate(_cost(total=1199))
    errors = field_errors(exc_info.value.errors())
    assert errors["total"] == "total must equal the sum of the cost categories (1200)"


def test_cost_estimate_total_must_be_positive() -> None:
    with pytest.raises(ValidationError) as exc_info:
        CostEstimate.model_validate(_cost(registration=0, travel=0, hotels=0, meals=0, other=0, total=0))
    assert field_errors(exc_info.value.errors())["total"].startswith("total must be greater than zero")


@pytest.mark.parametrize("code", ["US", "USDX", "U5D", ""])
def test_cost_estimate_rejects_bad_currency(code: str) -> None:
    with pytest.raises(ValidationError):
        CostEstimate.model_validate(_cost(currency_code=code))


def test_cost_estimate_serializes_money_as_numbers() -> None:
    dumped = CostEstimate.model_validate(_cost()).model_dump(mode="json")
    assert dumped["total"] == 1200.0
    assert isinstance(dumped["travel"], float)


# ---------------------------------------------------------------------------
# SubmitRequestPayload
# ---------------------------------------------------------------------------


def test_submit_payload_valid() -> None:
    payload = SubmitRequestPayload.model_validate(build_payload())
    assert payload.event_name == "Global Engineering Summit"


def test_submit_payload_strips_whitespace() -> None:
    payload = SubmitRequestPayload.model_validate(build_payload(event_name="  Global Summit  "))
    assert payload.event_name == "Global Summit"


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("event_name", "ab"),
        ("event_name", "x" * 201),
        ("origin", ""),
        ("destination", "x" * 151),
        ("role", "keynote"),
        ("transportation_mode", "teleport"),
    ],
)
def test_submit_payload_rejects_out_of_range_fields(field: str, value: str) -> None:
    with pytest.raises(ValidationError) as exc_info:
        SubmitRequestPayload.model_validate(build_payload(**{field: value}))
    assert field in field_errors(exc_info.value.errors())


@pytest.mark.parametrize(
    ("website", "message"),
    [
        ("not a url", "Event website must be a valid URL."),
        ("http://events.contoso.example", "Event website must use https."),
        ("ftp://events.contoso.example", "Event website must be a valid URL."),
    ],
)
def test_submit_payload_website_rules(website: str, message: str) -> None:
    with pytest.raises(ValidationError) as exc_info:
        SubmitRequestPayload.model_validate(build_payload(event_website=website))
    assert field_errors(exc_info.value.errors())["event_website"] == message


def test_submit_payload_reports_nested_cost_error_path() -> None:
    with pytest.raises(ValidationError) as exc_info:
        SubmitRequestPayload.model_validate(build_payload(cost_estimate=_cost(total=1)))
    assert "cost_estimate.total" in field_errors(exc_info.value.errors())


# ---------------------------------------------------------------------------
# Decisions, comments and queries
# ---------------------------------------------------------------------------


def test_decision_payload_valid() -> None:
    payload = DecisionPayload.model_validate({"decision_type": "rejected", "comment": " no ", "expected_version": 3})
    assert payload.decision_type == DecisionType.REJECTED
    assert payload.comment == "no"
    assert payload.expected_version == 3


def test_decision_payload_rejects_version_below_one() -> None:
    with pytest.raises(ValidationError):
        DecisionPayload.model_validate({"decision_type": "approved", "comment": "ok", "expected_version": 0})


def test_decision_payload_rejects_unknown_decision() -> None:
    with pytest.raises(ValidationError):
        DecisionPayload.model_validate({"decision_type": "maybe", "comment": "ok", "expected_version": 1})


def test_comment_payload_rejects_blank() -> None:
    with pytest.raises(ValidationError):
        CommentPayload.model_validate({"comment": "  "})


def test_history_query_treats_naive_bounds_as_utc() -> None:
    query = HistoryQuery.model_validate({"from": "2026-01-01T09:00:00", "event_types": ["approved"]})
    assert query.from_ == datetime(2026, 1, 1, 9, 0, tzinfo=UTC)
    assert query.event_types == [HistoryEventType.APPROVED]


def test_request_query_limit_bounds() -> None:
    with pytest.raises(ValidationError):
        RequestQuery(limit=101)
    with pytest.raises(ValidationError):
        RequestQuery(offset=-1)
