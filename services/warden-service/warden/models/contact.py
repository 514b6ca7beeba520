from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from .base import WardenDoc, new_id, utcnow


class ContactType(str, Enum):
    EMAIL = "EMAIL"
    PHONE = "PHONE"


def normalize_contact(value: str, type: ContactType) -> str:
    if type == ContactType.EMAIL:
        return value.strip().lower()
    # phone: trim only, no E.164 rewriting
    return value.strip()


class ContactMethod(WardenDoc):
    """
    Stored in MongoDB.

    Immutable apart from the one-way unverified -> verified transition.
    """
    id: str = Field(alias="_id")
    user_id: str
    type: ContactType
    value: str
    verified: bool = False
    verified_at: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def create(
        cls,
        user_id: str,
        type: ContactType,
        value: str,
        *,
        verified: bool = False,
        now: Optional[datetime] = None,
    ) -> "ContactMethod":
        ts = now or utcnow()
        return cls(
            id=new_id(),
            user_id=user_id,
            type=type,
            value=normalize_contact(value, type),
            verified=verified,
            verified_at=ts if verified else None,
            created_at=ts,
        )

    def mark_verified(self, now: Optional[datetime] = None) -> "ContactMethod":
        if self.verified:
            return self
        return self.model_copy(update={"verified": True, "verified_at": now or utcnow()})
