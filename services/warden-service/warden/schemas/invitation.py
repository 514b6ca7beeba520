from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from ..models import Invitation, InvitationStatus


class InvitationCreate(BaseModel):
    email: str
    role_id: str


class InvitationOut(BaseModel):
    id: str
    email: str
    role_id: str
    # stored status; EXPIRED only ever shows up in effective_status
    status: InvitationStatus
    effective_status: InvitationStatus
    invited_by: str
    created_at: datetime
    expires_at: datetime
    accepted_at: Optional[datetime] = None

    @classmethod
    def of(cls, invitation: Invitation, now: datetime) -> "InvitationOut":
        return cls(
            id=invitation.id,
            email=invitation.email,
            role_id=invitation.role_id,
            status=invitation.status,
            effective_status=invitation.effective_status(now),
            invited_by=invitation.invited_by,
            created_at=invitation.created_at,
            expires_at=invitation.expires_at,
            accepted_at=invitation.accepted_at,
        )


class InvitationCreated(InvitationOut):
    """Only the creating admin sees the token; the invitee gets it from the notifier."""
    token: str

    @classmethod
    def of(cls, invitation: Invitation, now: datetime) -> "InvitationCreated":
        return cls(**InvitationOut.of(invitation, now).model_dump(), token=invitation.token)


class InvitationPreview(BaseModel):
    """What an invitee may see before accepting."""
    email: str
    role_id: str
    effective_status: InvitationStatus
    expires_at: datetime


class InvitationList(BaseModel):
    items: List[InvitationOut] = []
