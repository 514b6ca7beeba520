from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from ..models import ContactType, UserStatus


class RoleCreate(BaseModel):
    name: str


class RoleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    created_at: datetime


class RoleDetail(RoleOut):
    permission_ids: List[str] = []


class PermissionCreate(BaseModel):
    id: str
    description: Optional[str] = None


class PermissionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    description: Optional[str] = None
    resource: str
    action: str


class UserCreate(BaseModel):
    status: UserStatus = UserStatus.ACTIVE


class UserStatusUpdate(BaseModel):
    status: UserStatus


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    status: UserStatus
    created_at: datetime
    updated_at: datetime


class IdentityLink(BaseModel):
    issuer: str
    subject: str


class IdentityOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    issuer: str
    subject: str


class ContactCreate(BaseModel):
    type: ContactType
    value: str
    verified: bool = False


class ContactOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    type: ContactType
    value: str
    verified: bool
    verified_at: Optional[datetime] = None
    created_at: datetime


class UserDetail(UserOut):
    role_ids: List[str] = []
    identities: List[IdentityOut] = []
    contacts: List[ContactOut] = []


class MeOut(BaseModel):
    user_id: str
    status: UserStatus
    role_ids: List[str] = []
    permissions: List[str] = []
