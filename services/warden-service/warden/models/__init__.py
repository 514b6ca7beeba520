from .base import Clock, utcnow
from .user import User, UserStatus
from .identity import ExternalIdentity, ExternalIdentityKey
from .role import Role
from .permission import Permission, WardenPermissions
from .invitation import Invitation, InvitationStatus, normalize_email
from .contact import ContactMethod, ContactType, normalize_contact
from .preferences import UserPreferences
from .principal import Principal, VerifiedClaims

__all__ = [
    "Clock",
    "utcnow",
    "User",
    "UserStatus",
    "ExternalIdentity",
    "ExternalIdentityKey",
    "Role",
    "Permission",
    "WardenPermissions",
    "Invitation",
    "InvitationStatus",
    "normalize_email",
    "ContactMethod",
    "ContactType",
    "normalize_contact",
    "UserPreferences",
    "Principal",
    "VerifiedClaims",
]
