from __future__ import annotations

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING

from ..models import UserPreferences
from ..settings import settings
from .base import from_doc, to_doc


class UserPreferencesDAL:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.col = db[settings.COL_USER_PREFERENCES]

    async def ensure_indexes(self) -> None:
        await self.col.create_index([("user_id", ASCENDING), ("namespace", ASCENDING)], unique=True)

    async def find(self, user_id: str, namespace: str) -> Optional[UserPreferences]:
        return from_doc(UserPreferences, await self.col.find_one({"user_id": user_id, "namespace": namespace}))

    async def save(self, preferences: UserPreferences) -> UserPreferences:
        # keyed by (user_id, namespace); keep whichever _id the stored row already has
        doc = to_doc(preferences)
        await self.col.update_one(
            {"user_id": preferences.user_id, "namespace": preferences.namespace},
            {"$set": {"data": doc["data"]}, "$setOnInsert": {"_id": doc["_id"]}},
            upsert=True,
        )
        return preferences

    async def delete_for_user(self, user_id: str) -> int:
        r = await self.col.delete_many({"user_id": user_id})
        return r.deleted_count
