from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

AppUserRole = Literal["employee", "approver"]


class ActorInfo(BaseModel):
    """Identity of the user performing an operation, as resolved by the identity service."""

    id: str
    display_name: str
    role: AppUserRole = "employee"
