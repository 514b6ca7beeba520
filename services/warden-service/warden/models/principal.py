from __future__ import annotations

from typing import FrozenSet, Optional

from pydantic import BaseModel, ConfigDict


class VerifiedClaims(BaseModel):
    """
    Claims of a token that was verified upstream (signature, audience, expiry).
    warden never looks at the raw JWT.
    """
    issuer: str
    subject: str
    email: Optional[str] = None
    email_verified: bool = False


class Principal(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    permissions: FrozenSet[str] = frozenset()

    def has(self, permission: str) -> bool:
        return permission in self.permissions
