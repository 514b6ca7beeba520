"""
Domain errors raised by warden services.

Four kinds, each surfaced to callers (the HTTP layer maps them to status codes):
  - NotFoundError:       a referenced role/permission/user/invitation/binding is missing
  - ConflictError:       duplicate role name, identity already linked, account already exists
  - StateViolationError: invitation not acceptable (expired, consumed, wrong email, unverified)
  - InvalidInputError:   blank or malformed required field
"""
from __future__ import annotations

from typing import Optional


class WardenError(Exception):
    pass


class NotFoundError(WardenError):
    pass


class ConflictError(WardenError):
    pass


class StateViolationError(WardenError):
    pass


class InvalidInputError(WardenError, ValueError):
    pass


# ----------------------------- not found -----------------------------

class UserNotFound(NotFoundError):
    def __init__(self, user_id: str):
        super().__init__(f"User does not exist: {user_id}")
        self.user_id = user_id


class RoleNotFound(NotFoundError):
    def __init__(self, role_id: str):
        super().__init__(f"Role does not exist: {role_id}")
        self.role_id = role_id


class PermissionNotFound(NotFoundError):
    def __init__(self, permission_id: str):
        super().__init__(f"Permission does not exist: {permission_id}")
        self.permission_id = permission_id


class InvitationNotFound(NotFoundError):
    pass


class BindingNotFound(NotFoundError):
    pass


class IdentityNotFound(NotFoundError):
    pass


class ContactMethodNotFound(NotFoundError):
    def __init__(self, contact_id: str):
        super().__init__(f"Contact method not found: {contact_id}")
        self.contact_id = contact_id


# ----------------------------- conflicts -----------------------------

class RoleAlreadyExists(ConflictError):
    def __init__(self, name: str):
        super().__init__(f"Role already exists: {name}")
        self.name = name


class UserAlreadyExists(ConflictError):
    pass


class IdentityAlreadyLinked(ConflictError):
    def __init__(self, issuer: str, subject: str, user_id: Optional[str] = None):
        super().__init__(f"External identity is already linked to another user: issuer={issuer} subject={subject}")
        self.issuer = issuer
        self.subject = subject
        self.user_id = user_id


# --------------------------- state violations ---------------------------

class InvitationExpired(StateViolationError):
    pass


class InvitationAlreadyAccepted(StateViolationError):
    """Raised for any non-PENDING invitation; `status` tells ACCEPTED from REVOKED."""

    def __init__(self, message: str, status: Optional[str] = None):
        super().__init__(message)
        self.status = status


class InvitationNotRevocable(StateViolationError):
    pass


class EmailMismatch(StateViolationError):
    pass


class EmailNotVerified(StateViolationError):
    pass
