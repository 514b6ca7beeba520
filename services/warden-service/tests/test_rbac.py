import asyncio

import pytest

from warden.errors import (
    BindingNotFound,
    InvalidInputError,
    PermissionNotFound,
    RoleAlreadyExists,
    RoleNotFound,
    UserNotFound,
)


async def _perms(services, *ids):
    for pid in ids:
        await services.catalog.register(pid)


async def test_create_role_rejects_duplicate_name(services):
    await services.rbac.create_role("editor")
    with pytest.raises(RoleAlreadyExists):
        await services.rbac.create_role("editor")
    # names are case-sensitive
    await services.rbac.create_role("Editor")
    assert [r.name for r in await services.rbac.list_roles()] == ["Editor", "editor"]


async def test_concurrent_create_role_yields_one_role(services):
    results = await asyncio.gather(*(services.rbac.create_role("ops") for _ in range(5)), return_exceptions=True)
    created = [r for r in results if not isinstance(r, Exception)]
    assert len(created) == 1
    assert all(isinstance(r, RoleAlreadyExists) for r in results if isinstance(r, Exception))


async def test_create_role_rejects_blank_name(services):
    with pytest.raises(InvalidInputError):
        await services.rbac.create_role("  ")


async def test_add_permission_requires_role_and_permission(services):
    role = await services.rbac.create_role("viewer")
    await _perms(services, "task.read")

    with pytest.raises(RoleNotFound):
        await services.rbac.add_permission_to_role("nope", "task.read")
    with pytest.raises(PermissionNotFound):
        await services.rbac.add_permission_to_role(role.id, "task.write")


async def test_add_is_idempotent_remove_is_not(services):
    role = await services.rbac.create_role("viewer")
    await _perms(services, "task.read")

    await services.rbac.add_permission_to_role(role.id, "task.read")
    await services.rbac.add_permission_to_role(role.id, "task.read")
    assert await services.rbac.permissions_for_role(role.id) == {"task.read"}

    await services.rbac.remove_permission_from_role(role.id, "task.read")
    with pytest.raises(BindingNotFound):
        await services.rbac.remove_permission_from_role(role.id, "task.read")
    with pytest.raises(RoleNotFound):
        await services.rbac.remove_permission_from_role("nope", "task.read")


async def test_user_role_binding_preconditions(services):
    role = await services.rbac.create_role("viewer")
    user = await services.users.create_user()

    with pytest.raises(UserNotFound):
        await services.rbac.assign_role_to_user("ghost", role.id)
    with pytest.raises(RoleNotFound):
        await services.rbac.assign_role_to_user(user.id, "nope")

    await services.rbac.assign_role_to_user(user.id, role.id)
    await services.rbac.assign_role_to_user(user.id, role.id)
    assert await services.rbac.roles_for_user(user.id) == {role.id}

    await services.rbac.remove_role_from_user(user.id, role.id)
    with pytest.raises(BindingNotFound):
        await services.rbac.remove_role_from_user(user.id, role.id)


async def test_resolve_permissions_without_roles_is_empty(services):
    user = await services.users.create_user()
    assert await services.rbac.resolve_permissions(user.id) == set()
    # unknown users resolve to nothing as well
    assert await services.rbac.resolve_permissions("ghost") == set()


async def test_resolve_permissions_is_union_of_roles(services):
    await _perms(services, "task.read", "task.write", "report.read")
    r1 = await services.rbac.create_role("r1")
    r2 = await services.rbac.create_role("r2")
    for pid in ("task.read", "task.write"):
        await services.rbac.add_permission_to_role(r1.id, pid)
    for pid in ("task.read", "report.read"):
        await services.rbac.add_permission_to_role(r2.id, pid)

    a = await services.users.create_user()
    b = await services.users.create_user()
    await services.rbac.assign_role_to_user(a.id, r1.id)
    await services.rbac.assign_role_to_user(a.id, r2.id)
    await services.rbac.assign_role_to_user(b.id, r2.id)
    await services.rbac.assign_role_to_user(b.id, r1.id)

    expected = {"task.read", "task.write", "report.read"}
    assert await services.rbac.resolve_permissions(a.id) == expected
    assert await services.rbac.resolve_permissions(b.id) == expected


async def test_delete_role_removes_bindings_first(services, store):
    await _perms(services, "task.read", "report.read")
    keep = await services.rbac.create_role("keep")
    doomed = await services.rbac.create_role("doomed")
    await services.rbac.add_permission_to_role(keep.id, "report.read")
    await services.rbac.add_permission_to_role(doomed.id, "task.read")

    user = await services.users.create_user()
    await services.rbac.assign_role_to_user(user.id, keep.id)
    await services.rbac.assign_role_to_user(user.id, doomed.id)
    assert await services.rbac.resolve_permissions(user.id) == {"task.read", "report.read"}

    await services.rbac.delete_role(doomed.id)

    assert await services.rbac.get_role(doomed.id) is None
    assert await store.role_permissions.permission_ids_for_role(doomed.id) == set()
    assert await services.rbac.roles_for_user(user.id) == {keep.id}
    assert await services.rbac.resolve_permissions(user.id) == {"report.read"}

    with pytest.raises(RoleNotFound):
        await services.rbac.delete_role(doomed.id)


class _RecordingRepo:
    """Wraps a repository and records destructive calls into a shared log."""

    def __init__(self, inner, name, calls):
        self._inner = inner
        self._name = name
        self._calls = calls

    def __getattr__(self, attr):
        fn = getattr(self._inner, attr)
        if attr.startswith(("remove_all", "delete")):
            async def wrapped(*args, **kwargs):
                self._calls.append(f"{self._name}.{attr}")
                return await fn(*args, **kwargs)

            return wrapped
        return fn


async def test_delete_role_call_order(services, store):
    role = await services.rbac.create_role("doomed")
    calls = []
    store.role_permissions = _RecordingRepo(store.role_permissions, "role_permissions", calls)
    store.user_roles = _RecordingRepo(store.user_roles, "user_roles", calls)
    store.roles = _RecordingRepo(store.roles, "roles", calls)

    await services.rbac.delete_role(role.id)

    assert calls == [
        "role_permissions.remove_all_for_role",
        "user_roles.remove_all_for_role",
        "roles.delete",
    ]
