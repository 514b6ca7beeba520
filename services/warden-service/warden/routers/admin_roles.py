from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..deps import current_principal, get_services, require_permission
from ..models import Principal, WardenPermissions
from ..schemas.admin import RoleCreate, RoleDetail, RoleOut
from ..services import Services

router = APIRouter(prefix="/admin/roles", tags=["admin.roles"])


@router.post("", status_code=201, response_model=RoleOut)
async def create_role(
    body: RoleCreate,
    _: Principal = Depends(require_permission(WardenPermissions.ROLE_CREATE)),
    services: Services = Depends(get_services),
):
    return RoleOut.model_validate(await services.rbac.create_role(body.name))


@router.get("")
async def list_roles(
    _: Principal = Depends(current_principal),
    services: Services = Depends(get_services),
):
    return {"items": [RoleOut.model_validate(r) for r in await services.rbac.list_roles()]}


@router.get("/{role_id}", response_model=RoleDetail)
async def get_role(
    role_id: str,
    _: Principal = Depends(current_principal),
    services: Services = Depends(get_services),
):
    role = await services.rbac.get_role(role_id)
    if not role:
        raise HTTPException(404, "Not found")
    perms = await services.rbac.permissions_for_role(role_id)
    return RoleDetail(**RoleOut.model_validate(role).model_dump(), permission_ids=sorted(perms))


@router.delete("/{role_id}")
async def delete_role(
    role_id: str,
    _: Principal = Depends(require_permission(WardenPermissions.ROLE_DELETE)),
    services: Services = Depends(get_services),
):
    await services.rbac.delete_role(role_id)
    return {"ok": True}


@router.put("/{role_id}/permissions/{permission_id}")
async def add_permission(
    role_id: str,
    permission_id: str,
    _: Principal = Depends(require_permission(WardenPermissions.ROLE_PERMISSION_ADD)),
    services: Services = Depends(get_services),
):
    await services.rbac.add_permission_to_role(role_id, permission_id)
    return {"ok": True}


@router.delete("/{role_id}/permissions/{permission_id}")
async def remove_permission(
    role_id: str,
    permission_id: str,
    _: Principal = Depends(require_permission(WardenPermissions.ROLE_PERMISSION_REMOVE)),
    services: Services = Depends(get_services),
):
    await services.rbac.remove_permission_from_role(role_id, permission_id)
    return {"ok": True}
