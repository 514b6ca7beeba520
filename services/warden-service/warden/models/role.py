from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import WardenDoc, new_id, utcnow


class Role(WardenDoc):
    """
    Stored in MongoDB.

    name is unique (exact, case-sensitive). Permissions and users are bound
    through the role_permissions / user_roles collections, not embedded here.
    """
    id: str = Field(alias="_id")
    name: str
    created_at: datetime

    @classmethod
    def create(cls, name: str, *, now: Optional[datetime] = None) -> "Role":
        return cls(id=new_id(), name=name, created_at=now or utcnow())