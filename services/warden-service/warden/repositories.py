"""
Persistence contracts consumed by the warden services.

Each collection is reached through its own protocol so a backend can be swapped
per collection (memory, Mongo, a remote store). Backends must honour:

  - ExternalIdentityRepository.insert is atomic per (issuer, subject): a second
    insert of a linked pair raises IdentityAlreadyLinked.
  - RoleRepository.insert raises RoleAlreadyExists on a duplicate name.
  - assign() on binding repositories is idempotent; remove() reports whether a
    binding was actually removed.
  - Role deletion order is the caller's job (RbacService): role_permissions,
    then user_roles, then the role row. Backends must not reorder it.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Protocol, Set

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


class UserRepository(Protocol):
    async def get(self, user_id: str) -> Optional[User]: ...

    async def exists(self, user_id: str) -> bool: ...

    async def save(self, user: User) -> User: ...

    async def delete(self, user_id: str) -> bool: ...


class ExternalIdentityRepository(Protocol):
    async def get(self, identity_id: str) -> Optional[ExternalIdentity]: ...

    async def find_by_issuer_and_subject(self, issuer: str, subject: str) -> Optional[ExternalIdentity]: ...

    async def find_by_user(self, user_id: str) -> List[ExternalIdentity]: ...

    async def insert(self, identity: ExternalIdentity) -> ExternalIdentity: ...

    async def delete(self, identity_id: str) -> bool: ...

    async def delete_for_user(self, user_id: str) -> int: ...


class RoleRepository(Protocol):
    async def get(self, role_id: str) -> Optional[Role]: ...

    async def get_by_name(self, name: str) -> Optional[Role]: ...

    async def exists(self, role_id: str) -> bool: ...

    async def insert(self, role: Role) -> Role: ...

    async def list(self) -> List[Role]: ...

    async def delete(self, role_id: str) -> bool: ...


class PermissionRepository(Protocol):
    async def get(self, permission_id: str) -> Optional[Permission]: ...

    async def exists(self, permission_id: str) -> bool: ...

    async def save(self, permission: Permission) -> Permission: ...

    async def list(self) -> List[Permission]: ...

    async def delete(self, permission_id: str) -> bool: ...


class RolePermissionRepository(Protocol):
    async def assign(self, role_id: str, permission_id: str) -> None: ...

    async def remove(self, role_id: str, permission_id: str) -> bool: ...

    async def permission_ids_for_role(self, role_id: str) -> Set[str]: ...

    async def permission_ids_for_roles(self, role_ids: Iterable[str]) -> Set[str]: ...

    async def remove_all_for_role(self, role_id: str) -> int: ...

    async def remove_all_for_permission(self, permission_id: str) -> int: ...


class UserRoleRepository(Protocol):
    async def assign(self, user_id: str, role_id: str) -> None: ...

    async def remove(self, user_id: str, role_id: str) -> bool: ...

    async def role_ids_for_user(self, user_id: str) -> Set[str]: ...

    async def remove_all_for_role(self, role_id: str) -> int: ...

    async def remove_all_for_user(self, user_id: str) -> int: ...


class InvitationRepository(Protocol):
    async def get(self, invitation_id: str) -> Optional[Invitation]: ...

    async def find_by_token(self, token: str) -> Optional[Invitation]: ...

    async def find_pending_by_email(self, email: str) -> Optional[Invitation]: ...

    async def save(self, invitation: Invitation) -> Invitation: ...

    async def list(
        self,
        *,
        status: Optional[InvitationStatus] = None,
        since: Optional[datetime] = None,
    ) -> List[Invitation]: ...


class ContactMethodRepository(Protocol):
    async def get(self, contact_id: str) -> Optional[ContactMethod]: ...

    async def find_by_type_and_value(self, type: ContactType, value: str) -> Optional[ContactMethod]: ...

    async def find_by_user(self, user_id: str) -> List[ContactMethod]: ...

    async def save(self, contact: ContactMethod) -> ContactMethod: ...

    async def delete(self, contact_id: str) -> bool: ...

    async def delete_for_user(self, user_id: str) -> int: ...


class UserPreferencesRepository(Protocol):
    async def find(self, user_id: str, namespace: str) -> Optional[UserPreferences]: ...

    async def save(self, preferences: UserPreferences) -> UserPreferences: ...

    async def delete_for_user(self, user_id: str) -> int: ...


@dataclass
class Store:
    """One repository per collection; mix backends freely."""
    users: UserRepository
    identities: ExternalIdentityRepository
    roles: RoleRepository
    permissions: PermissionRepository
    role_permissions: RolePermissionRepository
    user_roles: UserRoleRepository
    invitations: InvitationRepository
    contacts: ContactMethodRepository
    preferences: UserPreferencesRepository
