from __future__ import annotations

import logging
from typing import Optional

from ..errors import UserNotFound
from ..models import Clock, User, UserStatus, utcnow
from ..repositories import Store

log = logging.getLogger("warden.users")


class UserService:
    def __init__(self, store: Store, *, clock: Clock = utcnow):
        self.store = store
        self.clock = clock

    async def create_user(self, status: UserStatus = UserStatus.ACTIVE) -> User:
        user = await self.store.users.save(User.create(status, now=self.clock()))
        log.info("user created user_id=%s status=%s", user.id, user.status.value)
        return user

    async def get_user(self, user_id: str) -> Optional[User]:
        return await self.store.users.get(user_id)

    async def require_user(self, user_id: str) -> User:
        user = await self.store.users.get(user_id)
        if user is None:
            raise UserNotFound(user_id)
        return user

    async def set_status(self, user_id: str, status: UserStatus) -> User:
        user = await self.require_user(user_id)
        updated = await self.store.users.save(user.with_status(status, now=self.clock()))
        log.info("user status user_id=%s from=%s to=%s", user_id, user.status.value, status.value)
        return updated

    async def activate(self, user_id: str) -> User:
        return await self.set_status(user_id, UserStatus.ACTIVE)

    async def suspend(self, user_id: str) -> User:
        return await self.set_status(user_id, UserStatus.SUSPENDED)

    async def deactivate(self, user_id: str) -> User:
        return await self.set_status(user_id, UserStatus.DISABLED)

    async def delete_user(self, user_id: str) -> None:
        """Drops everything that points at the user before the user row itself."""
        await self.require_user(user_id)
        s = self.store
        roles = await s.user_roles.remove_all_for_user(user_id)
        identities = await s.identities.delete_for_user(user_id)
        contacts = await s.contacts.delete_for_user(user_id)
        await s.preferences.delete_for_user(user_id)
        await s.users.delete(user_id)
        log.info(
            "user deleted user_id=%s roles=%s identities=%s contacts=%s",
            user_id,
            roles,
            identities,
            contacts,
        )
