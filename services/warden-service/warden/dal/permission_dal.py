from __future__ import annotations

from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING

from ..models import Permission
from ..settings import settings
from .base import from_doc, to_doc


class PermissionDAL:
    """The permission id is the document `_id`, so uniqueness comes for free."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.col = db[settings.COL_PERMISSIONS]

    async def ensure_indexes(self) -> None:
        return None

    async def get(self, permission_id: str) -> Optional[Permission]:
        return from_doc(Permission, await self.col.find_one({"_id": permission_id}))

    async def exists(self, permission_id: str) -> bool:
        return await self.col.count_documents({"_id": permission_id}, limit=1) == 1

    async def save(self, permission: Permission) -> Permission:
        await self.col.replace_one({"_id": permission.id}, to_doc(permission), upsert=True)
        return permission

    async def list(self) -> List[Permission]:
        cur = self.col.find({}).sort("_id", ASCENDING)
        return [Permission.model_validate(d) async for d in cur]

    async def delete(self, permission_id: str) -> bool:
        r = await self.col.delete_one({"_id": permission_id})
        return r.deleted_count == 1
