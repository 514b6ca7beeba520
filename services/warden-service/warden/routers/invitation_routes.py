from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from ..deps import get_services, require_permission, verified_claims
from ..models import InvitationStatus, Principal, VerifiedClaims, WardenPermissions
from ..schemas.invitation import (
    InvitationCreate,
    InvitationCreated,
    InvitationList,
    InvitationOut,
    InvitationPreview,
)
from ..services import Services

router = APIRouter(prefix="/invitations", tags=["invitations"])


@router.post("", status_code=201, response_model=InvitationCreated)
async def create_invitation(
    body: InvitationCreate,
    principal: Principal = Depends(require_permission(WardenPermissions.INVITATION_CREATE)),
    services: Services = Depends(get_services),
):
    svc = services.invitations
    inv = await svc.create(body.email, body.role_id, invited_by=principal.user_id)
    return InvitationCreated.of(inv, svc.clock())


@router.get("", response_model=InvitationList)
async def list_invitations(
    status: Optional[InvitationStatus] = None,
    since: Optional[datetime] = None,
    _: Principal = Depends(require_permission(WardenPermissions.INVITATION_LIST)),
    services: Services = Depends(get_services),
):
    svc = services.invitations
    now = svc.clock()
    return InvitationList(items=[InvitationOut.of(i, now) for i in await svc.list(status=status, since=since)])


@router.get("/by-token/{token}", response_model=InvitationPreview)
async def preview_invitation(token: str, services: Services = Depends(get_services)):
    svc = services.invitations
    inv = await svc.find_by_token(token)
    if not inv:
        raise HTTPException(404, "Not found")
    return InvitationPreview(
        email=inv.email,
        role_id=inv.role_id,
        effective_status=inv.effective_status(svc.clock()),
        expires_at=inv.expires_at,
    )


@router.post("/accept/{token}", response_model=InvitationOut)
async def accept_invitation(
    token: str,
    claims: VerifiedClaims = Depends(verified_claims),
    services: Services = Depends(get_services),
):
    """The caller has no warden user yet, so only verified claims are required here."""
    svc = services.invitations
    inv = await svc.accept(token, claims)
    return InvitationOut.of(inv, svc.clock())


@router.get("/{invitation_id}", response_model=InvitationOut)
async def get_invitation(
    invitation_id: str,
    _: Principal = Depends(require_permission(WardenPermissions.INVITATION_LIST)),
    services: Services = Depends(get_services),
):
    svc = services.invitations
    inv = await svc.get(invitation_id)
    if not inv:
        raise HTTPException(404, "Not found")
    return InvitationOut.of(inv, svc.clock())


@router.post("/{invitation_id}/revoke", response_model=InvitationOut)
async def revoke_invitation(
    invitation_id: str,
    _: Principal = Depends(require_permission(WardenPermissions.INVITATION_REVOKE)),
    services: Services = Depends(get_services),
):
    svc = services.invitations
    inv = await svc.revoke(invitation_id)
    return InvitationOut.of(inv, svc.clock())
