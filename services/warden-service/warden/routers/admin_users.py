from __future__ import annotations

from fastapi import APIRouter, Depends

from ..deps import get_services, require_permission
from ..errors import ContactMethodNotFound
from ..models import Principal, WardenPermissions
from ..schemas.admin import (
    ContactCreate,
    ContactOut,
    IdentityLink,
    IdentityOut,
    UserCreate,
    UserDetail,
    UserOut,
    UserStatusUpdate,
)
from ..services import Services

router = APIRouter(prefix="/admin/users", tags=["admin.users"])

manage_users = require_permission(WardenPermissions.USER_MANAGE)


@router.post("", status_code=201, response_model=UserOut)
async def create_user(
    body: UserCreate,
    _: Principal = Depends(manage_users),
    services: Services = Depends(get_services),
):
    return UserOut.model_validate(await services.users.create_user(body.status))


@router.get("/{user_id}", response_model=UserDetail)
async def get_user(
    user_id: str,
    _: Principal = Depends(manage_users),
    services: Services = Depends(get_services),
):
    user = await services.users.require_user(user_id)
    return UserDetail(
        **UserOut.model_validate(user).model_dump(),
        role_ids=sorted(await services.rbac.roles_for_user(user_id)),
        identities=[IdentityOut.model_validate(i) for i in await services.identities.identities_for_user(user_id)],
        contacts=[ContactOut.model_validate(c) for c in await services.contacts.find_by_user(user_id)],
    )


@router.put("/{user_id}/status", response_model=UserOut)
async def set_status(
    user_id: str,
    body: UserStatusUpdate,
    _: Principal = Depends(manage_users),
    services: Services = Depends(get_services),
):
    return UserOut.model_validate(await services.users.set_status(user_id, body.status))


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    _: Principal = Depends(manage_users),
    services: Services = Depends(get_services),
):
    await services.users.delete_user(user_id)
    return {"ok": True}


# ---------------- roles ----------------

@router.put("/{user_id}/roles/{role_id}")
async def assign_role(
    user_id: str,
    role_id: str,
    _: Principal = Depends(require_permission(WardenPermissions.USER_ROLE_ASSIGN)),
    services: Services = Depends(get_services),
):
    await services.rbac.assign_role_to_user(user_id, role_id)
    return {"ok": True}


@router.delete("/{user_id}/roles/{role_id}")
async def remove_role(
    user_id: str,
    role_id: str,
    _: Principal = Depends(require_permission(WardenPermissions.USER_ROLE_REMOVE)),
    services: Services = Depends(get_services),
):
    await services.rbac.remove_role_from_user(user_id, role_id)
    return {"ok": True}


@router.get("/{user_id}/permissions")
async def user_permissions(
    user_id: str,
    _: Principal = Depends(manage_users),
    services: Services = Depends(get_services),
):
    await services.users.require_user(user_id)
    return {"items": sorted(await services.rbac.resolve_permissions(user_id))}


# ---------------- identities ----------------

@router.post("/{user_id}/identities", status_code=201, response_model=IdentityOut)
async def link_identity(
    user_id: str,
    body: IdentityLink,
    _: Principal = Depends(manage_users),
    services: Services = Depends(get_services),
):
    identity = await services.identities.link_external_identity(user_id, body.issuer, body.subject)
    return IdentityOut.model_validate(identity)


@router.delete("/{user_id}/identities/{identity_id}")
async def unlink_identity(
    user_id: str,
    identity_id: str,
    _: Principal = Depends(manage_users),
    services: Services = Depends(get_services),
):
    await services.identities.unlink_external_identity(user_id, identity_id)
    return {"ok": True}


# ---------------- contacts ----------------

@router.post("/{user_id}/contacts", status_code=201, response_model=ContactOut)
async def add_contact(
    user_id: str,
    body: ContactCreate,
    _: Principal = Depends(manage_users),
    services: Services = Depends(get_services),
):
    svc = services.contacts
    create = svc.create_verified if body.verified else svc.create_unverified
    return ContactOut.model_validate(await create(user_id, body.type, body.value))


@router.post("/{user_id}/contacts/{contact_id}/verify", response_model=ContactOut)
async def verify_contact(
    user_id: str,
    contact_id: str,
    _: Principal = Depends(manage_users),
    services: Services = Depends(get_services),
):
    await _require_owned_contact(services, user_id, contact_id)
    return ContactOut.model_validate(await services.contacts.mark_verified(contact_id))


@router.delete("/{user_id}/contacts/{contact_id}")
async def delete_contact(
    user_id: str,
    contact_id: str,
    _: Principal = Depends(manage_users),
    services: Services = Depends(get_services),
):
    await _require_owned_contact(services, user_id, contact_id)
    await services.contacts.delete(contact_id)
    return {"ok": True}


async def _require_owned_contact(services: Services, user_id: str, contact_id: str) -> None:
    contact = await services.contacts.get(contact_id)
    if contact is None or contact.user_id != user_id:
        raise ContactMethodNotFound(contact_id)
