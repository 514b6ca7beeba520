from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from .base import WardenDoc, new_id, utcnow


class UserStatus(str, Enum):
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    DISABLED = "DISABLED"


class User(WardenDoc):
    """
    Internal user record. Carries no profile data; external identities and
    contact methods point back at it by `user_id`.
    """
    id: str = Field(alias="_id")
    status: UserStatus = UserStatus.ACTIVE
    created_at: datetime
    updated_at: datetime

    @classmethod
    def create(cls, status: UserStatus = UserStatus.ACTIVE, *, now: Optional[datetime] = None) -> "User":
        ts = now or utcnow()
        return cls(id=new_id(), status=status, created_at=ts, updated_at=ts)

    def with_status(self, status: UserStatus, *, now: Optional[datetime] = None) -> "User":
        return self.model_copy(update={"status": status, "updated_at": now or utcnow()})

    def touch(self, *, now: Optional[datetime] = None) -> "User":
        return self.model_copy(update={"updated_at": now or utcnow()})
