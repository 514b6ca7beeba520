from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request

from .models import Principal, VerifiedClaims
from .services import Services
from .settings import settings

log = logging.getLogger("warden.auth")

_TRUTHY = {"1", "true", "yes", "on"}


def get_services(request: Request) -> Services:
    return request.app.state.services


def verified_claims(request: Request) -> VerifiedClaims:
    """
    Claims forwarded by the authenticating gateway. Signatures were checked
    upstream; this only reads the headers.
    """
    h = request.headers
    issuer = (h.get(settings.AUTH_ISSUER_HEADER) or "").strip()
    subject = (h.get(settings.AUTH_SUBJECT_HEADER) or "").strip()
    if not issuer or not subject:
        raise HTTPException(401, "Missing verified identity")
    email: Optional[str] = h.get(settings.AUTH_EMAIL_HEADER) or None
    verified = (h.get(settings.AUTH_EMAIL_VERIFIED_HEADER) or "").strip().lower() in _TRUTHY
    return VerifiedClaims(issuer=issuer, subject=subject, email=email, email_verified=verified)


async def current_principal(
    claims: VerifiedClaims = Depends(verified_claims),
    services: Services = Depends(get_services),
) -> Principal:
    principal = await services.principals.authenticate(claims.issuer, claims.subject)
    if principal is None:
        raise HTTPException(401, "Unknown identity")
    return principal


def require_permission(permission: str):
    async def _check(principal: Principal = Depends(current_principal)) -> Principal:
        if not principal.has(permission):
            log.warning("forbidden user_id=%s missing=%s", principal.user_id, permission)
            raise HTTPException(403, f"Missing permission: {permission}")
        return principal

    return _check
