from __future__ import annotations

from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError

from ..errors import IdentityAlreadyLinked
from ..models import ExternalIdentity
from ..settings import settings
from .base import from_doc, to_doc


class ExternalIdentityDAL:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.col = db[settings.COL_EXTERNAL_IDENTITIES]

    async def ensure_indexes(self) -> None:
        # (issuer, subject) -> at most one user; enforced by the server, not by a read-then-write
        await self.col.create_index([("issuer", ASCENDING), ("subject", ASCENDING)], unique=True)
        await self.col.create_index([("user_id", ASCENDING)])

    async def get(self, identity_id: str) -> Optional[ExternalIdentity]:
        return from_doc(ExternalIdentity, await self.col.find_one({"_id": identity_id}))

    async def find_by_issuer_and_subject(self, issuer: str, subject: str) -> Optional[ExternalIdentity]:
        return from_doc(ExternalIdentity, await self.col.find_one({"issuer": issuer, "subject": subject}))

    async def find_by_user(self, user_id: str) -> List[ExternalIdentity]:
        cur = self.col.find({"user_id": user_id}).sort([("issuer", ASCENDING), ("subject", ASCENDING)])
        return [ExternalIdentity.model_validate(d) async for d in cur]

    async def insert(self, identity: ExternalIdentity) -> ExternalIdentity:
        try:
            await self.col.insert_one(to_doc(identity))
        except DuplicateKeyError:
            owner = await self.find_by_issuer_and_subject(identity.issuer, identity.subject)
            raise IdentityAlreadyLinked(identity.issuer, identity.subject, owner.user_id if owner else None)
        return identity

    async def delete(self, identity_id: str) -> bool:
        r = await self.col.delete_one({"_id": identity_id})
        return r.deleted_count == 1

    async def delete_for_user(self, user_id: str) -> int:
        r = await self.col.delete_many({"user_id": user_id})
        return r.deleted_count
