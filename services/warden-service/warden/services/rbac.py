from __future__ import annotations

import logging
from typing import List, Optional, Set

from ..errors import (
    BindingNotFound,
    InvalidInputError,
    PermissionNotFound,
    RoleAlreadyExists,
    RoleNotFound,
    UserNotFound,
)
from ..models import Clock, Role, utcnow
from ..repositories import Store

log = logging.getLogger("warden.rbac")


class RbacService:
    """
    Roles, role -> permission bindings, user -> role bindings, and the
    effective permission set of a user.

    Assigning is idempotent; removing a binding that does not exist is an error.
    """

    def __init__(self, store: Store, *, clock: Clock = utcnow):
        self.store = store
        self.clock = clock

    # ---------------- roles ----------------

    async def create_role(self, name: str) -> Role:
        if not name or not name.strip():
            raise InvalidInputError("role name must not be blank")
        if await self.store.roles.get_by_name(name) is not None:
            raise RoleAlreadyExists(name)
        # the repository re-checks (unique index / atomic insert) for concurrent creates
        role = await self.store.roles.insert(Role.create(name, now=self.clock()))
        log.info("role created role_id=%s name=%s", role.id, role.name)
        return role

    async def delete_role(self, role_id: str) -> None:
        await self._require_role(role_id)
        # order matters: no binding may outlive the role it points at
        perms = await self.store.role_permissions.remove_all_for_role(role_id)
        users = await self.store.user_roles.remove_all_for_role(role_id)
        await self.store.roles.delete(role_id)
        log.info("role deleted role_id=%s permission_bindings=%s user_bindings=%s", role_id, perms, users)

    async def get_role(self, role_id: str) -> Optional[Role]:
        return await self.store.roles.get(role_id)

    async def list_roles(self) -> List[Role]:
        return await self.store.roles.list()

    # ---------------- role <-> permission ----------------

    async def add_permission_to_role(self, role_id: str, permission_id: str) -> None:
        await self._require_role(role_id)
        if not await self.store.permissions.exists(permission_id):
            raise PermissionNotFound(permission_id)
        await self.store.role_permissions.assign(role_id, permission_id)

    async def remove_permission_from_role(self, role_id: str, permission_id: str) -> None:
        await self._require_role(role_id)
        if not await self.store.role_permissions.remove(role_id, permission_id):
            raise BindingNotFound(f"Permission {permission_id} is not bound to role {role_id}")

    async def permissions_for_role(self, role_id: str) -> Set[str]:
        await self._require_role(role_id)
        return await self.store.role_permissions.permission_ids_for_role(role_id)

    # ---------------- user <-> role ----------------

    async def assign_role_to_user(self, user_id: str, role_id: str) -> None:
        await self._require_user(user_id)
        await self._require_role(role_id)
        await self.store.user_roles.assign(user_id, role_id)
        log.info("role assigned user_id=%s role_id=%s", user_id, role_id)

    async def remove_role_from_user(self, user_id: str, role_id: str) -> None:
        await self._require_user(user_id)
        await self._require_role(role_id)
        if not await self.store.user_roles.remove(user_id, role_id):
            raise BindingNotFound(f"Role {role_id} is not assigned to user {user_id}")
        log.info("role removed user_id=%s role_id=%s", user_id, role_id)

    async def roles_for_user(self, user_id: str) -> Set[str]:
        return await self.store.user_roles.role_ids_for_user(user_id)

    # ---------------- resolution ----------------

    async def resolve_permissions(self, user_id: str) -> Set[str]:
        role_ids = await self.store.user_roles.role_ids_for_user(user_id)
        if not role_ids:
            return set()
        return await self.store.role_permissions.permission_ids_for_roles(role_ids)

    # ---------------- helpers ----------------

    async def _require_role(self, role_id: str) -> None:
        if not await self.store.roles.exists(role_id):
            raise RoleNotFound(role_id)

    async def _require_user(self, user_id: str) -> None:
        if not await self.store.users.exists(user_id):
            raise UserNotFound(user_id)
