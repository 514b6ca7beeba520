from __future__ import annotations

from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError

from ..errors import RoleAlreadyExists
from ..models import Role
from ..settings import settings
from .base import from_doc, to_doc


class RoleDAL:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.col = db[settings.COL_ROLES]

    async def ensure_indexes(self) -> None:
        await self.col.create_index([("name", ASCENDING)], unique=True)

    async def get(self, role_id: str) -> Optional[Role]:
        return from_doc(Role, await self.col.find_one({"_id": role_id}))

    async def get_by_name(self, name: str) -> Optional[Role]:
        return from_doc(Role, await self.col.find_one({"name": name}))

    async def exists(self, role_id: str) -> bool:
        return await self.col.count_documents({"_id": role_id}, limit=1) == 1

    async def insert(self, role: Role) -> Role:
        try:
            await self.col.insert_one(to_doc(role))
        except DuplicateKeyError:
            raise RoleAlreadyExists(role.name)
        return role

    async def list(self) -> List[Role]:
        cur = self.col.find({}).sort("name", ASCENDING)
        return [Role.model_validate(d) async for d in cur]

    async def delete(self, role_id: str) -> bool:
        r = await self.col.delete_one({"_id": role_id})
        return r.deleted_count == 1
