from __future__ import annotations

import enum


class RoleType(enum.StrEnum):
    """Role the submitter plays at the event."""

    SPEAKER = "speaker"
    ORGANIZER = "organizer"
    ASSISTANT = "assistant"


class TransportationMode(enum.StrEnum):
    """How the submitter travels to the event."""

    AIR = "air"
    RAIL = "rail"
    CAR = "car"
    BUS = "bus"
    OTHER = "other"


class RequestStatus(enum.StrEnum):
    """State machine for approval requests."""

    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class DecisionType(enum.StrEnum):
    """Outcome of an approver's decision."""

    APPROVED = "approved"
    REJECTED = "rejected"


class ActorRole(enum.StrEnum):
    """Role of the actor recorded on a history entry."""

    EMPLOYEE = "employee"
    APPROVER = "approver"
    SYSTEM = "system"


class HistoryEventType(enum.StrEnum):
    """Lifecycle event recorded in the request history."""

    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMMENTED = "commented"
    NOTIFICATION_SENT = "notification_sent"
    STALE_DETECTED = "stale_detected"


class NotificationChannel(enum.StrEnum):
    """Delivery channel of a status notification."""

    IN_APP = "in_app"
    EMAIL = "email"
    TEAMS = "teams"


class DeliveryStatus(enum.StrEnum):
    """Delivery state of a status notification."""

    QUEUED = "queued"
    SENT = "sent"
    FAILED = "failed"


class RequestSort(enum.StrEnum):
    """Ordering applied to request listings."""

    NEWEST = "newest"
    OLDEST = "oldest"


TERMINAL_STATUSES = frozenset({RequestStatus.APPROVED, RequestStatus.REJECTED})
