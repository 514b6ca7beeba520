from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .errors import IdentityAlreadyLinked, RoleAlreadyExists
from .models import (
    ContactMethod,
    ContactType,
    ExternalIdentity,
    Invitation,
    InvitationStatus,
    Permission,
    Role,
    User,
    UserPreferences,
)
from .models.base import as_utc
from .repositories import Store


class InMemoryUserRepository:
    def __init__(self) -> None:
        self._rows: Dict[str, User] = {}

    async def get(self, user_id: str) -> Optional[User]:
        return self._rows.get(user_id)

    async def exists(self, user_id: str) -> bool:
        return user_id in self._rows

    async def save(self, user: User) -> User:
        self._rows[user.id] = user
        return user

    async def delete(self, user_id: str) -> bool:
        return self._rows.pop(user_id, None) is not None


class InMemoryExternalIdentityRepository:
    def __init__(self) -> None:
        self._rows: Dict[str, ExternalIdentity] = {}
        self._by_key: Dict[Tuple[str, str], str] = {}

    async def get(self, identity_id: str) -> Optional[ExternalIdentity]:
        return self._rows.get(identity_id)

    async def find_by_issuer_and_subject(self, issuer: str, subject: str) -> Optional[ExternalIdentity]:
        identity_id = self._by_key.get((issuer, subject))
        return self._rows.get(identity_id) if identity_id else None

    async def find_by_user(self, user_id: str) -> List[ExternalIdentity]:
        return [i for i in self._rows.values() if i.user_id == user_id]

    async def insert(self, identity: ExternalIdentity) -> ExternalIdentity:
        # check and write happen without yielding to the loop
        key = (identity.issuer, identity.subject)
        owner_id = self._by_key.get(key)
        if owner_id is not None:
            raise IdentityAlreadyLinked(identity.issuer, identity.subject, self._rows[owner_id].user_id)
        self._by_key[key] = identity.id
        self._rows[identity.id] = identity
        return identity

    async def delete(self, identity_id: str) -> bool:
        identity = self._rows.pop(identity_id, None)
        if identity is None:
            return False
        self._by_key.pop((identity.issuer, identity.subject), None)
        return True

    async def delete_for_user(self, user_id: str) -> int:
        ids = [i.id for i in self._rows.values() if i.user_id == user_id]
        for identity_id in ids:
            await self.delete(identity_id)
        return len(ids)


class InMemoryRoleRepository:
    def __init__(self) -> None:
        self._rows: Dict[str, Role] = {}

    async def get(self, role_id: str) -> Optional[Role]:
        return self._rows.get(role_id)

    async def get_by_name(self, name: str) -> Optional[Role]:
        return next((r for r in self._rows.values() if r.name == name), None)

    async def exists(self, role_id: str) -> bool:
        return role_id in self._rows

    async def insert(self, role: Role) -> Role:
        if any(r.name == role.name for r in self._rows.values()):
            raise RoleAlreadyExists(role.name)
        self._rows[role.id] = role
        return role

    async def list(self) -> List[Role]:
        return sorted(self._rows.values(), key=lambda r: r.name)

    async def delete(self, role_id: str) -> bool:
        return self._rows.pop(role_id, None) is not None


class InMemoryPermissionRepository:
    def __init__(self) -> None:
        self._rows: Dict[str, Permission] = {}

    async def get(self, permission_id: str) -> Optional[Permission]:
        return self._rows.get(permission_id)

    async def exists(self, permission_id: str) -> bool:
        return permission_id in self._rows

    async def save(self, permission: Permission) -> Permission:
        self._rows[permission.id] = permission
        return permission

    async def list(self) -> List[Permission]:
        return sorted(self._rows.values(), key=lambda p: p.id)

    async def delete(self, permission_id: str) -> bool:
        return self._rows.pop(permission_id, None) is not None


class InMemoryRolePermissionRepository:
    def __init__(self) -> None:
        self._pairs: Set[Tuple[str, str]] = set()

    async def assign(self, role_id: str, permission_id: str) -> None:
        self._pairs.add((role_id, permission_id))

    async def remove(self, role_id: str, permission_id: str) -> bool:
        try:
            self._pairs.remove((role_id, permission_id))
        except KeyError:
            return False
        return True

    async def permission_ids_for_role(self, role_id: str) -> Set[str]:
        return {p for r, p in self._pairs if r == role_id}

    async def permission_ids_for_roles(self, role_ids: Iterable[str]) -> Set[str]:
        wanted = set(role_ids)
        return {p for r, p in self._pairs if r in wanted}

    async def remove_all_for_role(self, role_id: str) -> int:
        doomed = {pair for pair in self._pairs if pair[0] == role_id}
        self._pairs -= doomed
        return len(doomed)

    async def remove_all_for_permission(self, permission_id: str) -> int:
        doomed = {pair for pair in self._pairs if pair[1] == permission_id}
        self._pairs -= doomed
        return len(doomed)


class InMemoryUserRoleRepository:
    def __init__(self) -> None:
        self._pairs: Set[Tuple[str, str]] = set()

    async def assign(self, user_id: str, role_id: str) -> None:
        self._pairs.add((user_id, role_id))

    async def remove(self, user_id: str, role_id: str) -> bool:
        try:
            self._pairs.remove((user_id, role_id))
        except KeyError:
            return False
        return True

    async def role_ids_for_user(self, user_id: str) -> Set[str]:
        return {r for u, r in self._pairs if u == user_id}

    async def remove_all_for_role(self, role_id: str) -> int:
        doomed = {pair for pair in self._pairs if pair[1] == role_id}
        self._pairs -= doomed
        return len(doomed)

    async def remove_all_for_user(self, user_id: str) -> int:
        doomed = {pair for pair in self._pairs if pair[0] == user_id}
        self._pairs -= doomed
        return len(doomed)


class InMemoryInvitationRepository:
    def __init__(self) -> None:
        self._rows: Dict[str, Invitation] = {}

    async def get(self, invitation_id: str) -> Optional[Invitation]:
        return self._rows.get(invitation_id)

    async def find_by_token(self, token: str) -> Optional[Invitation]:
        return next((i for i in self._rows.values() if i.token == token), None)

    async def find_pending_by_email(self, email: str) -> Optional[Invitation]:
        return next(
            (i for i in self._rows.values() if i.email == email and i.status == InvitationStatus.PENDING),
            None,
        )

    async def save(self, invitation: Invitation) -> Invitation:
        self._rows[invitation.id] = invitation
        return invitation

    async def list(
        self,
        *,
        status: Optional[InvitationStatus] = None,
        since: Optional[datetime] = None,
    ) -> List[Invitation]:
        out = [
            i
            for i in self._rows.values()
            if (status is None or i.status == status)
            and (since is None or as_utc(i.created_at) >= as_utc(since))
        ]
        return sorted(out, key=lambda i: i.created_at)


class InMemoryContactMethodRepository:
    def __init__(self) -> None:
        self._rows: Dict[str, ContactMethod] = {}

    async def get(self, contact_id: str) -> Optional[ContactMethod]:
        return self._rows.get(contact_id)

    async def find_by_type_and_value(self, type: ContactType, value: str) -> Optional[ContactMethod]:
        return next((c for c in self._rows.values() if c.type == type and c.value == value), None)

    async def find_by_user(self, user_id: str) -> List[ContactMethod]:
        return sorted((c for c in self._rows.values() if c.user_id == user_id), key=lambda c: c.created_at)

    async def save(self, contact: ContactMethod) -> ContactMethod:
        self._rows[contact.id] = contact
        return contact

    async def delete(self, contact_id: str) -> bool:
        return self._rows.pop(contact_id, None) is not None

    async def delete_for_user(self, user_id: str) -> int:
        ids = [c.id for c in self._rows.values() if c.user_id == user_id]
        for contact_id in ids:
            del self._rows[contact_id]
        return len(ids)


class InMemoryUserPreferencesRepository:
    def __init__(self) -> None:
        self._rows: Dict[Tuple[str, str], UserPreferences] = {}

    async def find(self, user_id: str, namespace: str) -> Optional[UserPreferences]:
        return self._rows.get((user_id, namespace))

    async def save(self, preferences: UserPreferences) -> UserPreferences:
        self._rows[(preferences.user_id, preferences.namespace)] = preferences
        return preferences

    async def delete_for_user(self, user_id: str) -> int:
        keys = [k for k in self._rows if k[0] == user_id]
        for k in keys:
            del self._rows[k]
        return len(keys)


def memory_store() -> Store:
    """
    Simple store for dev/tests/single-instance.
    State lives in the process; use the Mongo DALs for anything shared.
    """
    return Store(
        users=InMemoryUserRepository(),
        identities=InMemoryExternalIdentityRepository(),
        roles=InMemoryRoleRepository(),
        permissions=InMemoryPermissionRepository(),
        role_permissions=InMemoryRolePermissionRepository(),
        user_roles=InMemoryUserRoleRepository(),
        invitations=InMemoryInvitationRepository(),
        contacts=InMemoryContactMethodRepository(),
        preferences=InMemoryUserPreferencesRepository(),
    )
