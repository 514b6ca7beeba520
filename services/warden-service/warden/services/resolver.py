from __future__ import annotations

import logging
from typing import Optional, Protocol

from ..errors import IdentityAlreadyLinked, InvalidInputError
from ..models import ExternalIdentityKey, Principal, UserStatus
from ..repositories import Store
from .identity import IdentityService
from .rbac import RbacService
from .users import UserService

log = logging.getLogger("warden.resolver")


class ProvisioningPolicy(Protocol):
    """What to do with a verified identity that no user owns yet. None means no access."""

    async def resolve_user(self, key: ExternalIdentityKey) -> Optional[str]: ...


class DenyUnknownIdentityPolicy:
    async def resolve_user(self, key: ExternalIdentityKey) -> Optional[str]:
        log.warning("unknown identity denied issuer=%s subject=%s", key.issuer, key.subject)
        return None


class AutoProvisionIdentityPolicy:
    def __init__(self, users: UserService, identities: IdentityService):
        self.users = users
        self.identities = identities

    async def resolve_user(self, key: ExternalIdentityKey) -> Optional[str]:
        user = await self.users.create_user(UserStatus.ACTIVE)
        try:
            await self.identities.link_external_identity(user.id, key.issuer, key.subject)
        except IdentityAlreadyLinked as e:
            # a concurrent request provisioned the same identity first; keep theirs
            await self.users.delete_user(user.id)
            if e.user_id is None:
                # owner could not be read back; fail rather than deny a linked identity
                raise
            log.info("auto-provision lost race issuer=%s subject=%s user_id=%s", key.issuer, key.subject, e.user_id)
            return e.user_id
        log.info("auto-provisioned user_id=%s issuer=%s subject=%s", user.id, key.issuer, key.subject)
        return user.id


def build_provisioning_policy(name: str, users: UserService, identities: IdentityService) -> ProvisioningPolicy:
    """Picked once at startup from PROVISIONING_POLICY."""
    if name == "deny":
        return DenyUnknownIdentityPolicy()
    if name == "auto":
        return AutoProvisionIdentityPolicy(users, identities)
    raise InvalidInputError(f"Unknown provisioning policy: {name!r}")


class IdentityResolver:
    def __init__(self, store: Store, policy: ProvisioningPolicy):
        self.store = store
        self.policy = policy

    async def resolve(self, issuer: str, subject: str) -> Optional[str]:
        """
        (issuer, subject) -> internal user id.

        A linked identity returns its owner. Otherwise the provisioning policy
        decides, and whatever it returns (possibly None) is the answer.
        """
        key = ExternalIdentityKey.of(issuer, subject)
        identity = await self.store.identities.find_by_issuer_and_subject(key.issuer, key.subject)
        if identity is not None:
            return identity.user_id
        return await self.policy.resolve_user(key)


class PrincipalResolver:
    """Verified claims -> Principal (user id + effective permissions)."""

    def __init__(self, identities: IdentityResolver, rbac: RbacService):
        self.identities = identities
        self.rbac = rbac

    async def authenticate(self, issuer: str, subject: str) -> Optional[Principal]:
        user_id = await self.identities.resolve(issuer, subject)
        if user_id is None:
            return None
        permissions = await self.rbac.resolve_permissions(user_id)
        return Principal(user_id=user_id, permissions=frozenset(permissions))
