from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from ..deps import current_principal, get_services
from ..models import Principal
from ..schemas.admin import MeOut
from ..services import Services

router = APIRouter(prefix="/me", tags=["me"])


@router.get("", response_model=MeOut)
async def me(
    principal: Principal = Depends(current_principal),
    services: Services = Depends(get_services),
):
    user = await services.users.require_user(principal.user_id)
    return MeOut(
        user_id=user.id,
        status=user.status,
        role_ids=sorted(await services.rbac.roles_for_user(user.id)),
        permissions=sorted(principal.permissions),
    )


@router.get("/preferences/{namespace}")
async def get_preferences(
    namespace: str,
    principal: Principal = Depends(current_principal),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    return await services.preferences.get_preferences(principal.user_id, namespace)


@router.put("/preferences/{namespace}")
async def put_preferences(
    namespace: str,
    body: Dict[str, Any] = Body(...),
    principal: Principal = Depends(current_principal),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    saved = await services.preferences.set_preferences(principal.user_id, namespace, body)
    return saved.data
