from __future__ import annotations

from typing import Protocol, runtime_checkable

from event_approval.exceptions import UnauthorizedError
from event_approval.schemas.auth import ActorInfo

DEMO_EMPLOYEE = ActorInfo(id="employee-001", display_name="Alex Employee", role="employee")
DEMO_APPROVER = ActorInfo(id="approver-001", display_name="Ari Approver", role="approver")


@runtime_checkable
class IdentityService(Protocol):
    """Interface for resolving the current actor."""

    async def resolve_actor(self, user_id: str | None) -> ActorInfo:
        """Return the actor for ``user_id``. Raises UnauthorizedError if it cannot be resolved."""
        ...


class InMemoryIdentityService:
    """Directory-backed implementation for development and tests."""

    def __init__(self) -> None:
        self._actors: dict[str, ActorInfo] = {}

    def seed(self, actor: ActorInfo) -> None:
        """Register an actor in the directory."""
        self._actors[actor.id] = actor

    async def resolve_actor(self, user_id: str | None) -> ActorInfo:
        if not user_id:
            raise UnauthorizedError("Missing user identity")
        actor = self._actors.get(user_id)
        if actor is None:
            raise UnauthorizedError(f"Unknown user {user_id}")
        return actor
