from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..deps import current_principal, get_services, require_permission
from ..models import Principal, WardenPermissions
from ..schemas.admin import PermissionCreate, PermissionOut
from ..services import Services

router = APIRouter(prefix="/admin/permissions", tags=["admin.permissions"])


@router.post("", status_code=201, response_model=PermissionOut)
async def register_permission(
    body: PermissionCreate,
    _: Principal = Depends(require_permission(WardenPermissions.PERMISSION_REGISTER)),
    services: Services = Depends(get_services),
):
    return PermissionOut.model_validate(await services.catalog.register(body.id, body.description))


@router.get("")
async def list_permissions(
    _: Principal = Depends(current_principal),
    services: Services = Depends(get_services),
):
    return {"items": [PermissionOut.model_validate(p) for p in await services.catalog.list()]}


@router.get("/{permission_id}", response_model=PermissionOut)
async def get_permission(
    permission_id: str,
    _: Principal = Depends(current_principal),
    services: Services = Depends(get_services),
):
    p = await services.catalog.get(permission_id)
    if not p:
        raise HTTPException(404, "Not found")
    return PermissionOut.model_validate(p)


@router.delete("/{permission_id}")
async def unregister_permission(
    permission_id: str,
    _: Principal = Depends(require_permission(WardenPermissions.PERMISSION_REGISTER)),
    services: Services = Depends(get_services),
):
    await services.catalog.unregister(permission_id)
    return {"ok": True}
