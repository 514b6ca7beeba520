from motor.motor_asyncio import AsyncIOMotorDatabase

from ..repositories import Store
from .user_dal import UserDAL
from .identity_dal import ExternalIdentityDAL
from .role_dal import RoleDAL
from .permission_dal import PermissionDAL
from .binding_dal import RolePermissionDAL, UserRoleDAL
from .invitation_dal import InvitationDAL
from .contact_dal import ContactMethodDAL
from .preferences_dal import UserPreferencesDAL


def mongo_store(db: AsyncIOMotorDatabase) -> Store:
    return Store(
        users=UserDAL(db),
        identities=ExternalIdentityDAL(db),
        roles=RoleDAL(db),
        permissions=PermissionDAL(db),
        role_permissions=RolePermissionDAL(db),
        user_roles=UserRoleDAL(db),
        invitations=InvitationDAL(db),
        contacts=ContactMethodDAL(db),
        preferences=UserPreferencesDAL(db),
    )


async def ensure_indexes(store: Store) -> None:
    """Safe to call repeatedly; skips repositories that are not Mongo-backed."""
    for repo in vars(store).values():
        fn = getattr(repo, "ensure_indexes", None)
        if fn is not None:
            await fn()


__all__ = [
    "UserDAL",
    "ExternalIdentityDAL",
    "RoleDAL",
    "PermissionDAL",
    "RolePermissionDAL",
    "UserRoleDAL",
    "InvitationDAL",
    "ContactMethodDAL",
    "UserPreferencesDAL",
    "mongo_store",
    "ensure_indexes",
]
