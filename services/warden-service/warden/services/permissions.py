from __future__ import annotations

import logging
from typing import List, Optional

from ..errors import InvalidInputError, PermissionNotFound
from ..models import Permission
from ..models.permission import PERMISSION_ID_RE
from ..repositories import Store

log = logging.getLogger("warden.permissions")


class PermissionCatalog:
    """Registry of permission ids. A permission must be registered before a role can carry it."""

    def __init__(self, store: Store):
        self.store = store

    async def register(self, permission_id: str, description: Optional[str] = None) -> Permission:
        pid = (permission_id or "").strip()
        if not pid or not PERMISSION_ID_RE.match(pid):
            raise InvalidInputError(f"Invalid permission id: {permission_id!r}")
        permission = await self.store.permissions.save(Permission(id=pid, description=description))
        log.info("permission registered id=%s", pid)
        return permission

    async def get(self, permission_id: str) -> Optional[Permission]:
        return await self.store.permissions.get(permission_id)

    async def exists(self, permission_id: str) -> bool:
        return await self.store.permissions.exists(permission_id)

    async def require(self, permission_id: str) -> Permission:
        permission = await self.store.permissions.get(permission_id)
        if permission is None:
            raise PermissionNotFound(permission_id)
        return permission

    async def list(self) -> List[Permission]:
        return await self.store.permissions.list()

    async def unregister(self, permission_id: str) -> None:
        await self.require(permission_id)
        unbound = await self.store.role_permissions.remove_all_for_permission(permission_id)
        await self.store.permissions.delete(permission_id)
        log.info("permission unregistered id=%s bindings_removed=%s", permission_id, unbound)
