from __future__ import annotations

from typing import NamedTuple

from pydantic import Field, field_validator

from ..errors import InvalidInputError
from .base import WardenDoc, new_id


def _require_text(name: str, value: str) -> str:
    if value is None or not str(value).strip():
        raise InvalidInputError(f"{name} must not be blank")
    return value


class ExternalIdentityKey(NamedTuple):
    """(iss, sub) of an already-verified token."""
    issuer: str
    subject: str

    @classmethod
    def of(cls, issuer: str, subject: str) -> "ExternalIdentityKey":
        return cls(_require_text("issuer", issuer), _require_text("subject", subject))


class ExternalIdentity(WardenDoc):
    """
    Stored in MongoDB.

    issuer + subject uniquely identify an external identity; at most one user owns it.
    """
    id: str = Field(alias="_id")
    user_id: str
    issuer: str
    subject: str

    @field_validator("issuer", "subject")
    @classmethod
    def _not_blank(cls, v: str, info) -> str:
        if not v.strip():
            raise ValueError(f"{info.field_name} must not be blank")
        return v

    @classmethod
    def create(cls, user_id: str, key: ExternalIdentityKey) -> "ExternalIdentity":
        return cls(id=new_id(), user_id=user_id, issuer=key.issuer, subject=key.subject)

    def key(self) -> ExternalIdentityKey:
        return ExternalIdentityKey(self.issuer, self.subject)
