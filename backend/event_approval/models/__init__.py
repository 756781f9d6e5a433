from sqlmodel import SQLModel

from event_approval.models.base import TimestampMixin, UTCDateTime, UUIDBase
from event_approval.models.decision import ApprovalDecision
from event_approval.models.enums import (
    ActorRole,
    DecisionType,
    DeliveryStatus,
    HistoryEventType,
    NotificationChannel,
    RequestSort,
    RequestStatus,
    RoleType,
    TransportationMode,
)
from event_approval.models.history import RequestHistoryEntry
from event_approval.models.notification import StatusNotification
from event_approval.models.request import EventApprovalRequest

__all__ = [
    "ActorRole",
    "ApprovalDecision",
    "DecisionType",
    "DeliveryStatus",
    "EventApprovalRequest",
    "HistoryEventType",
    "NotificationChannel",
    "RequestHistoryEntry",
    "RequestSort",
    "RequestStatus",
    "RoleType",
    "SQLModel",
    "StatusNotification",
    "TimestampMixin",
    "TransportationMode",
    "UTCDateTime",
    "UUIDBase",
]
