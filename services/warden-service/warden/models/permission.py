from __future__ import annotations

import re
from typing import Optional, Tuple

from pydantic import Field

from .base import WardenDoc

# dotted token, e.g. "task.read" / "warden.invitation.create"
PERMISSION_ID_RE = re.compile(r"^[A-Za-z0-9_\-]+(\.[A-Za-z0-9_\-]+)*$")


def derive_resource_action(key: str) -> Tuple[str, str]:
    """
    "workspace.read"          -> ("workspace", "read")
    "warden.invitation.list"  -> ("warden", "invitation.list")
    "admin"                   -> ("global", "admin")
    """
    if "." not in key:
        return ("global", key)
    resource, action = key.split(".", 1)
    return (resource.strip() or "global", action.strip() or "use")


class Permission(WardenDoc):
    """
    Stored in MongoDB.

    id: the permission string itself, used in authorization checks (e.g. "task.read")
    description: optional human-friendly text for admin UIs
    """
    id: str = Field(alias="_id")
    description: Optional[str] = None

    @property
    def resource(self) -> str:
        return derive_resource_action(self.id)[0]

    @property
    def action(self) -> str:
        return derive_resource_action(self.id)[1]


class WardenPermissions:
    """Permissions guarding warden's own management operations."""

    INVITATION_CREATE = "warden.invitation.create"
    INVITATION_REVOKE = "warden.invitation.revoke"
    INVITATION_LIST = "warden.invitation.list"

    ROLE_CREATE = "warden.role.create"
    ROLE_DELETE = "warden.role.delete"

    USER_ROLE_ASSIGN = "warden.user.role.assign"
    USER_ROLE_REMOVE = "warden.user.role.remove"

    ROLE_PERMISSION_ADD = "warden.role.permission.add"
    ROLE_PERMISSION_REMOVE = "warden.role.permission.remove"

    PERMISSION_REGISTER = "warden.permission.register"

    USER_MANAGE = "warden.user.manage"

    DESCRIPTIONS = {
        INVITATION_CREATE: "Create and send invitations",
        INVITATION_REVOKE: "Revoke pending invitations",
        INVITATION_LIST: "List and view invitations",
        ROLE_CREATE: "Create roles",
        ROLE_DELETE: "Delete roles",
        USER_ROLE_ASSIGN: "Assign roles to users",
        USER_ROLE_REMOVE: "Remove roles from users",
        ROLE_PERMISSION_ADD: "Add permissions to roles",
        ROLE_PERMISSION_REMOVE: "Remove permissions from roles",
        PERMISSION_REGISTER: "Register and remove catalog permissions",
        USER_MANAGE: "Create, suspend and delete users; manage identities and contacts",
    }
