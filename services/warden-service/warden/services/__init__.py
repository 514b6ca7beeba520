from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..events.notifiers import ContactConfirmationNotifier, InvitationNotifier
from ..locks import KeyedLock
from ..models import Clock, utcnow
from ..repositories import Store
from .contacts import ContactMethodService
from .identity import IdentityService
from .invitations import InvitationService
from .permissions import PermissionCatalog
from .preferences import PreferencesService, merge_layers
from .rbac import RbacService
from .resolver import (
    AutoProvisionIdentityPolicy,
    DenyUnknownIdentityPolicy,
    IdentityResolver,
    PrincipalResolver,
    ProvisioningPolicy,
    build_provisioning_policy,
)
from .users import UserService


@dataclass
class Services:
    users: UserService
    identities: IdentityService
    rbac: RbacService
    catalog: PermissionCatalog
    contacts: ContactMethodService
    preferences: PreferencesService
    invitations: InvitationService
    resolver: IdentityResolver
    principals: PrincipalResolver


def build_services(
    store: Store,
    *,
    invitation_notifier: InvitationNotifier,
    contact_notifier: Optional[ContactConfirmationNotifier] = None,
    provisioning_policy: str = "deny",
    ttl_hours: int = 72,
    require_verified_email: bool = True,
    trust_issuer_verification: bool = True,
    clock: Clock = utcnow,
) -> Services:
    users = UserService(store, clock=clock)
    identities = IdentityService(store)
    rbac = RbacService(store, clock=clock)
    contacts = ContactMethodService(store, notifier=contact_notifier, clock=clock)
    resolver = IdentityResolver(store, build_provisioning_policy(provisioning_policy, users, identities))
    return Services(
        users=users,
        identities=identities,
        rbac=rbac,
        catalog=PermissionCatalog(store),
        contacts=contacts,
        preferences=PreferencesService(store),
        invitations=InvitationService(
            store,
            users=users,
            identities=identities,
            rbac=rbac,
            contacts=contacts,
            notifier=invitation_notifier,
            ttl_hours=ttl_hours,
            require_verified_email=require_verified_email,
            trust_issuer_verification=trust_issuer_verification,
            clock=clock,
            locks=KeyedLock(),
        ),
        resolver=resolver,
        principals=PrincipalResolver(resolver, rbac),
    )


__all__ = [
    "Services",
    "build_services",
    "UserService",
    "IdentityService",
    "RbacService",
    "PermissionCatalog",
    "ContactMethodService",
    "PreferencesService",
    "merge_layers",
    "InvitationService",
    "IdentityResolver",
    "PrincipalResolver",
    "ProvisioningPolicy",
    "DenyUnknownIdentityPolicy",
    "AutoProvisionIdentityPolicy",
    "build_provisioning_policy",
]
