import asyncio

import pytest

from warden.errors import InvalidInputError, PermissionNotFound, UserNotFound
from warden.locks import KeyedLock
from warden.models import ContactType, UserStatus, WardenPermissions
from warden.seeds.seed_authz import ADMIN_ROLE, seed_authz

from conftest import T0


async def test_user_status_transitions(services, clock):
    user = await services.users.create_user()
    assert user.status == UserStatus.ACTIVE and user.created_at == T0

    when = clock.advance(hours=1)
    suspended = await services.users.suspend(user.id)
    assert suspended.status == UserStatus.SUSPENDED and suspended.updated_at == when

    assert (await services.users.deactivate(user.id)).status == UserStatus.DISABLED
    assert (await services.users.activate(user.id)).status == UserStatus.ACTIVE

    with pytest.raises(UserNotFound):
        await services.users.suspend("ghost")


async def test_create_user_with_status(services):
    user = await services.users.create_user(UserStatus.SUSPENDED)
    assert (await services.users.require_user(user.id)).status == UserStatus.SUSPENDED


async def test_delete_user_cascades(services, store):
    role = await services.rbac.create_role("member")
    user = await services.users.create_user()
    await services.rbac.assign_role_to_user(user.id, role.id)
    await services.identities.link_external_identity(user.id, "idp", "s1")
    await services.contacts.create_verified(user.id, ContactType.EMAIL, "gone@example.com")
    await services.preferences.set_preferences(user.id, "ui", {"theme": "dark"})

    await services.users.delete_user(user.id)

    assert await services.users.get_user(user.id) is None
    assert await services.rbac.roles_for_user(user.id) == set()
    assert await store.identities.find_by_issuer_and_subject("idp", "s1") is None
    assert await services.contacts.find_by_type_and_value(ContactType.EMAIL, "gone@example.com") is None
    assert await services.preferences.get_preferences(user.id, "ui") == {}
    # the role itself survives
    assert await services.rbac.get_role(role.id) is not None

    with pytest.raises(UserNotFound):
        await services.users.delete_user(user.id)


async def test_catalog_register_and_lookup(services):
    p = await services.catalog.register("task.read", "Read tasks")
    assert (p.resource, p.action) == ("task", "read")
    assert await services.catalog.exists("task.read")

    # registering again updates the description
    await services.catalog.register("task.read", "Read any task")
    assert (await services.catalog.require("task.read")).description == "Read any task"
    assert [x.id for x in await services.catalog.list()] == ["task.read"]

    with pytest.raises(PermissionNotFound):
        await services.catalog.require("task.write")


@pytest.mark.parametrize("bad", ["", "   ", "task read", "task..read", ".task", "task.read."])
async def test_catalog_rejects_malformed_ids(services, bad):
    with pytest.raises(InvalidInputError):
        await services.catalog.register(bad)


async def test_unregister_drops_bindings(services):
    await services.catalog.register("task.read")
    role = await services.rbac.create_role("viewer")
    await services.rbac.add_permission_to_role(role.id, "task.read")
    user = await services.users.create_user()
    await services.rbac.assign_role_to_user(user.id, role.id)

    await services.catalog.unregister("task.read")

    assert await services.rbac.permissions_for_role(role.id) == set()
    assert await services.rbac.resolve_permissions(user.id) == set()
    with pytest.raises(PermissionNotFound):
        await services.catalog.unregister("task.read")


async def test_seed_is_idempotent(services):
    await seed_authz(services, admin_issuer="idp", admin_subject="root")
    await seed_authz(services, admin_issuer="idp", admin_subject="root")

    roles = await services.rbac.list_roles()
    assert [r.name for r in roles] == [ADMIN_ROLE]
    assert await services.rbac.permissions_for_role(roles[0].id) == set(WardenPermissions.DESCRIPTIONS)

    principal = await services.principals.authenticate("idp", "root")
    assert principal.has(WardenPermissions.INVITATION_CREATE)
    assert principal.has(WardenPermissions.USER_MANAGE)


async def test_keyed_lock_serializes_per_key_and_cleans_up():
    locks = KeyedLock()
    order = []

    async def worker(key, tag):
        async with locks.hold(key):
            order.append(f"{tag}-in")
            await asyncio.sleep(0)
            order.append(f"{tag}-out")

    await asyncio.gather(worker("a", 1), worker("a", 2), worker("b", 3))

    a_events = [e for e in order if e[0] in "12"]
    assert a_events == ["1-in", "1-out", "2-in", "2-out"]
    assert len(locks) == 0
