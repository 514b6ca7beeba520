from __future__ import annotations

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING

from ..models import User
from ..settings import settings
from .base import from_doc, to_doc


class UserDAL:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.col = db[settings.COL_USERS]

    async def ensure_indexes(self) -> None:
        await self.col.create_index([("status", ASCENDING)])

    async def get(self, user_id: str) -> Optional[User]:
        return from_doc(User, await self.col.find_one({"_id": user_id}))

    async def exists(self, user_id: str) -> bool:
        return await self.col.count_documents({"_id": user_id}, limit=1) == 1

    async def save(self, user: User) -> User:
        await self.col.replace_one({"_id": user.id}, to_doc(user), upsert=True)
        return user

    async def delete(self, user_id: str) -> bool:
        r = await self.col.delete_one({"_id": user_id})
        return r.deleted_count == 1
