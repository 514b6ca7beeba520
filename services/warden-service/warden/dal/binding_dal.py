from __future__ import annotations

from typing import Iterable, Set

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError

from ..settings import settings


class RolePermissionDAL:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.col = db[settings.COL_ROLE_PERMISSIONS]

    async def ensure_indexes(self) -> None:
        await self.col.create_index([("role_id", ASCENDING), ("permission_id", ASCENDING)], unique=True)
        await self.col.create_index([("permission_id", ASCENDING)])

    async def assign(self, role_id: str, permission_id: str) -> None:
        key = {"role_id": role_id, "permission_id": permission_id}
        try:
            await self.col.update_one(key, {"$setOnInsert": key}, upsert=True)
        except DuplicateKeyError:
            # concurrent upsert of the same pair; the binding exists either way
            return

    async def remove(self, role_id: str, permission_id: str) -> bool:
        r = await self.col.delete_one({"role_id": role_id, "permission_id": permission_id})
        return r.deleted_count == 1

    async def permission_ids_for_role(self, role_id: str) -> Set[str]:
        return await self.permission_ids_for_roles([role_id])

    async def permission_ids_for_roles(self, role_ids: Iterable[str]) -> Set[str]:
        ids = list(set(role_ids))
        if not ids:
            return set()
        return set(await self.col.distinct("permission_id", {"role_id": {"$in": ids}}))

    async def remove_all_for_role(self, role_id: str) -> int:
        r = await self.col.delete_many({"role_id": role_id})
        return r.deleted_count

    async def remove_all_for_permission(self, permission_id: str) -> int:
        r = await self.col.delete_many({"permission_id": permission_id})
        return r.deleted_count


class UserRoleDAL:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.col = db[settings.COL_USER_ROLES]

    async def ensure_indexes(self) -> None:
        await self.col.create_index([("user_id", ASCENDING), ("role_id", ASCENDING)], unique=True)
        await self.col.create_index([("role_id", ASCENDING)])

    async def assign(self, user_id: str, role_id: str) -> None:
        key = {"user_id": user_id, "role_id": role_id}
        try:
            await self.col.update_one(key, {"$setOnInsert": key}, upsert=True)
        except DuplicateKeyError:
            return

    async def remove(self, user_id: str, role_id: str) -> bool:
        r = await self.col.delete_one({"user_id": user_id, "role_id": role_id})
        return r.deleted_count == 1

    async def role_ids_for_user(self, user_id: str) -> Set[str]:
        return set(await self.col.distinct("role_id", {"user_id": user_id}))

    async def remove_all_for_role(self, role_id: str) -> int:
        r = await self.col.delete_many({"role_id": role_id})
        return r.deleted_count

    async def remove_all_for_user(self, user_id: str) -> int:
        r = await self.col.delete_many({"user_id": user_id})
        return r.deleted_count
