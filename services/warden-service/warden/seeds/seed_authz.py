# services/warden-service/warden/seeds/seed_authz.py
from __future__ import annotations

"""
Warden seed: management permissions + admin role (+ optional bootstrap admin)

Creates:
- every warden.* management permission in the catalog
- role "warden:admin" carrying all of them
- if WARDEN_BOOTSTRAP_ADMIN_ISSUER / _SUBJECT are set: a user owning that
  identity, holding warden:admin

Run (Mongo store):
  python -m warden.seeds.seed_authz

Notes:
- Idempotent: safe to run multiple times. The service also runs it at startup.
- Uses the services directly (no need to run the API).
"""

import asyncio
import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient

from warden.dal import ensure_indexes, mongo_store
from warden.errors import RoleAlreadyExists
from warden.events.notifiers import LoggingInvitationNotifier
from warden.logger import setup_logging
from warden.models import Role, WardenPermissions
from warden.services import Services, build_services
from warden.settings import settings

log = logging.getLogger("warden.seed")

ADMIN_ROLE = "warden:admin"


async def ensure_permissions(services: Services) -> None:
    for key, description in WardenPermissions.DESCRIPTIONS.items():
        existing = await services.catalog.get(key)
        if existing and existing.description == description:
            continue
        await services.catalog.register(key, description)


async def ensure_admin_role(services: Services) -> Role:
    role = await services.rbac.store.roles.get_by_name(ADMIN_ROLE)
    if role is None:
        try:
            role = await services.rbac.create_role(ADMIN_ROLE)
        except RoleAlreadyExists:
            # race with another instance seeding
            role = await services.rbac.store.roles.get_by_name(ADMIN_ROLE)
    # add is idempotent, so this also back-fills permissions added since the last seed
    for key in WardenPermissions.DESCRIPTIONS:
        await services.rbac.add_permission_to_role(role.id, key)
    return role


async def ensure_admin_identity(services: Services, role: Role, *, issuer: str, subject: str) -> str:
    identity = await services.rbac.store.identities.find_by_issuer_and_subject(issuer, subject)
    if identity is not None:
        user_id = identity.user_id
    else:
        user = await services.users.create_user()
        await services.identities.link_external_identity(user.id, issuer, subject)
        user_id = user.id
        log.info("bootstrap admin created user_id=%s issuer=%s subject=%s", user_id, issuer, subject)
    await services.rbac.assign_role_to_user(user_id, role.id)
    return user_id


async def seed_authz(
    services: Services,
    *,
    admin_issuer: Optional[str] = None,
    admin_subject: Optional[str] = None,
) -> Role:
    await ensure_permissions(services)
    role = await ensure_admin_role(services)
    if admin_issuer and admin_subject:
        await ensure_admin_identity(services, role, issuer=admin_issuer, subject=admin_subject)
    return role


# ------------------------------------------------------------------------------
# Main entrypoint
# ------------------------------------------------------------------------------
async def main() -> None:
    setup_logging(settings.LOG_LEVEL)
    client = AsyncIOMotorClient(settings.MONGO_URI, tz_aware=True)
    store = mongo_store(client[settings.MONGO_DB])

    # Ensure indexes exist (safe to call repeatedly)
    await ensure_indexes(store)

    services = build_services(store, invitation_notifier=LoggingInvitationNotifier(settings.INVITATION_BASE_URL))
    await seed_authz(
        services,
        admin_issuer=settings.BOOTSTRAP_ADMIN_ISSUER,
        admin_subject=settings.BOOTSTRAP_ADMIN_SUBJECT,
    )

    client.close()
    log.info("seed complete: permissions, admin role (idempotent)")


if __name__ == "__main__":
    asyncio.run(main())
