from __future__ import annotations

import secrets
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from pydantic import Field

from .base import WardenDoc, as_utc, new_id, utcnow


class InvitationStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    EXPIRED = "EXPIRED"
    REVOKED = "REVOKED"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def new_token() -> str:
    return secrets.token_urlsafe(32)


class Invitation(WardenDoc):
    """
    Stored in MongoDB.

    EXPIRED is never written: a PENDING invitation past `expires_at` is treated
    as expired by every reader (see `is_expired` / `effective_status`).
    """
    id: str = Field(alias="_id")
    email: str
    role_id: str
    token: str
    status: InvitationStatus = InvitationStatus.PENDING
    invited_by: str
    created_at: datetime
    expires_at: datetime
    accepted_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        *,
        email: str,
        role_id: str,
        invited_by: str,
        ttl_hours: int,
        now: Optional[datetime] = None,
    ) -> "Invitation":
        ts = now or utcnow()
        return cls(
            id=new_id(),
            email=normalize_email(email),
            role_id=role_id,
            token=new_token(),
            status=InvitationStatus.PENDING,
            invited_by=invited_by,
            created_at=ts,
            expires_at=ts + timedelta(hours=ttl_hours),
        )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utcnow()) > as_utc(self.expires_at)

    def is_pending(self, now: Optional[datetime] = None) -> bool:
        return self.status == InvitationStatus.PENDING and not self.is_expired(now)

    def effective_status(self, now: Optional[datetime] = None) -> InvitationStatus:
        if self.status == InvitationStatus.PENDING and self.is_expired(now):
            return InvitationStatus.EXPIRED
        return self.status

    def accept(self, now: Optional[datetime] = None) -> "Invitation":
        return self.model_copy(update={"status": InvitationStatus.ACCEPTED, "accepted_at": now or utcnow()})

    def revoke(self) -> "Invitation":
        return self.model_copy(update={"status": InvitationStatus.REVOKED})
