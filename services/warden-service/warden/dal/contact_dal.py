from __future__ import annotations

from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING

from ..models import ContactMethod, ContactType
from ..settings import settings
from .base import from_doc, to_doc


class ContactMethodDAL:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.col = db[settings.COL_CONTACT_METHODS]

    async def ensure_indexes(self) -> None:
        await self.col.create_index([("type", ASCENDING), ("value", ASCENDING)])
        await self.col.create_index([("user_id", ASCENDING), ("type", ASCENDING)])

    async def get(self, contact_id: str) -> Optional[ContactMethod]:
        return from_doc(ContactMethod, await self.col.find_one({"_id": contact_id}))

    async def find_by_type_and_value(self, type: ContactType, value: str) -> Optional[ContactMethod]:
        return from_doc(ContactMethod, await self.col.find_one({"type": type.value, "value": value}))

    async def find_by_user(self, user_id: str) -> List[ContactMethod]:
        cur = self.col.find({"user_id": user_id}).sort("created_at", ASCENDING)
        return [ContactMethod.model_validate(d) async for d in cur]

    async def save(self, contact: ContactMethod) -> ContactMethod:
        await self.col.replace_one({"_id": contact.id}, to_doc(contact), upsert=True)
        return contact

    async def delete(self, contact_id: str) -> bool:
        r = await self.col.delete_one({"_id": contact_id})
        return r.deleted_count == 1

    async def delete_for_user(self, user_id: str) -> int:
        r = await self.col.delete_many({"user_id": user_id})
        return r.deleted_count
