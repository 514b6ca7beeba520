from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING

from ..models import Invitation, InvitationStatus
from ..settings import settings
from .base import from_doc, to_doc


class InvitationDAL:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.col = db[settings.COL_INVITATIONS]

    async def ensure_indexes(self) -> None:
        await self.col.create_index([("token", ASCENDING)], unique=True)
        await self.col.create_index([("email", ASCENDING), ("status", ASCENDING)])
        await self.col.create_index([("status", ASCENDING), ("created_at", ASCENDING)])

    async def get(self, invitation_id: str) -> Optional[Invitation]:
        return from_doc(Invitation, await self.col.find_one({"_id": invitation_id}))

    async def find_by_token(self, token: str) -> Optional[Invitation]:
        return from_doc(Invitation, await self.col.find_one({"token": token}))

    async def find_pending_by_email(self, email: str) -> Optional[Invitation]:
        d = await self.col.find_one(
            {"email": email, "status": InvitationStatus.PENDING.value},
            sort=[("created_at", ASCENDING)],
        )
        return from_doc(Invitation, d)

    async def save(self, invitation: Invitation) -> Invitation:
        await self.col.replace_one({"_id": invitation.id}, to_doc(invitation), upsert=True)
        return invitation

    async def list(
        self,
        *,
        status: Optional[InvitationStatus] = None,
        since: Optional[datetime] = None,
    ) -> List[Invitation]:
        query: Dict[str, Any] = {}
        if status is not None:
            query["status"] = status.value
        if since is not None:
            query["created_at"] = {"$gte": since}
        cur = self.col.find(query).sort("created_at", ASCENDING)
        return [Invitation.model_validate(d) async for d in cur]
