import pytest
from httpx import ASGITransport, AsyncClient

from warden.main import app
from warden.seeds.seed_authz import seed_authz

API = "/api/warden"
ADMIN = {"x-auth-issuer": "idp", "x-auth-subject": "admin"}
ALICE = {
    "x-auth-issuer": "idp",
    "x-auth-subject": "alice-sub",
    "x-auth-email": "Alice@Example.com",
    "x-auth-email-verified": "true",
}


@pytest.fixture
async def client(services):
    await seed_authz(services, admin_issuer="idp", admin_subject="admin")
    app.state.services = services
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        app.state.services = None


async def test_health(client):
    res = await client.get("/healthz")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"

    res = await client.get("/readyz")
    assert res.status_code == 200
    assert res.json()["store"] == "memory"


async def test_request_id_is_echoed(client):
    res = await client.get("/healthz", headers={"x-request-id": "rid-123"})
    assert res.headers["x-request-id"] == "rid-123"


async def test_missing_or_unknown_identity_is_401(client):
    assert (await client.get(f"{API}/me")).status_code == 401
    res = await client.get(f"{API}/me", headers={"x-auth-issuer": "idp", "x-auth-subject": "stranger"})
    assert res.status_code == 401


async def test_me_for_admin(client):
    res = await client.get(f"{API}/me", headers=ADMIN)
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "ACTIVE"
    assert "warden.invitation.create" in body["permissions"]
    assert len(body["role_ids"]) == 1


async def test_missing_permission_is_403(client, services):
    user = await services.users.create_user()
    await services.identities.link_external_identity(user.id, "idp", "nobody")
    res = await client.post(
        f"{API}/admin/roles",
        json={"name": "sneaky"},
        headers={"x-auth-issuer": "idp", "x-auth-subject": "nobody"},
    )
    assert res.status_code == 403


async def test_invitation_flow(client, invitation_notifier):
    res = await client.post(f"{API}/admin/roles", json={"name": "member"}, headers=ADMIN)
    assert res.status_code == 201
    role_id = res.json()["id"]

    res = await client.post(f"{API}/invitations", json={"email": " ALICE@example.com", "role_id": role_id}, headers=ADMIN)
    assert res.status_code == 201
    created = res.json()
    assert created["email"] == "alice@example.com"
    assert created["status"] == "PENDING"
    assert created["accepted_at"] is None
    token = created["token"]
    assert invitation_notifier.sent[-1].token == token

    res = await client.get(f"{API}/invitations/by-token/{token}")
    assert res.status_code == 200
    assert res.json()["effective_status"] == "PENDING"
    assert "token" not in res.json()

    res = await client.post(f"{API}/invitations/accept/{token}", headers=ALICE)
    assert res.status_code == 200
    assert res.json()["status"] == "ACCEPTED"

    res = await client.post(f"{API}/invitations/accept/{token}", headers=ALICE)
    assert res.status_code == 409
    assert res.json()["error"] == "InvitationAlreadyAccepted"

    res = await client.get(f"{API}/me", headers=ALICE)
    assert res.status_code == 200
    assert res.json()["role_ids"] == [role_id]

    res = await client.get(f"{API}/invitations", params={"status": "ACCEPTED"}, headers=ADMIN)
    assert [i["id"] for i in res.json()["items"]] == [created["id"]]
    assert "token" not in res.json()["items"][0]

    res = await client.post(f"{API}/invitations/{created['id']}/revoke", headers=ADMIN)
    assert res.status_code == 409


async def test_expired_invitation_is_410(client, services, clock):
    role = await services.rbac.create_role("member")
    inv = await services.invitations.create("alice@example.com", role.id, invited_by="admin")
    clock.advance(days=2)

    res = await client.get(f"{API}/invitations/{inv.id}", headers=ADMIN)
    assert res.json()["status"] == "PENDING"
    assert res.json()["effective_status"] == "EXPIRED"

    res = await client.post(f"{API}/invitations/accept/{inv.token}", headers=ALICE)
    assert res.status_code == 410


async def test_accept_requires_verified_email(client, services):
    role = await services.rbac.create_role("member")
    inv = await services.invitations.create("alice@example.com", role.id, invited_by="admin")

    res = await client.post(
        f"{API}/invitations/accept/{inv.token}",
        headers={**ALICE, "x-auth-email-verified": "false"},
    )
    assert res.status_code == 409
    assert res.json()["error"] == "EmailNotVerified"


async def test_role_and_permission_admin(client):
    res = await client.post(f"{API}/admin/permissions", json={"id": "task.read", "description": "Read"}, headers=ADMIN)
    assert res.status_code == 201
    assert res.json()["resource"] == "task"

    res = await client.post(f"{API}/admin/permissions", json={"id": "not valid"}, headers=ADMIN)
    assert res.status_code == 400

    role_id = (await client.post(f"{API}/admin/roles", json={"name": "viewer"}, headers=ADMIN)).json()["id"]
    assert (await client.post(f"{API}/admin/roles", json={"name": "viewer"}, headers=ADMIN)).status_code == 409

    res = await client.put(f"{API}/admin/roles/{role_id}/permissions/task.read", headers=ADMIN)
    assert res.status_code == 200
    res = await client.put(f"{API}/admin/roles/{role_id}/permissions/task.write", headers=ADMIN)
    assert res.status_code == 404

    res = await client.get(f"{API}/admin/roles/{role_id}", headers=ADMIN)
    assert res.json()["permission_ids"] == ["task.read"]

    res = await client.delete(f"{API}/admin/roles/{role_id}/permissions/task.read", headers=ADMIN)
    assert res.status_code == 200
    res = await client.delete(f"{API}/admin/roles/{role_id}/permissions/task.read", headers=ADMIN)
    assert res.status_code == 404

    assert (await client.delete(f"{API}/admin/roles/{role_id}", headers=ADMIN)).status_code == 200
    assert (await client.delete(f"{API}/admin/roles/{role_id}", headers=ADMIN)).status_code == 404


async def test_user_admin(client):
    res = await client.post(f"{API}/admin/users", json={}, headers=ADMIN)
    assert res.status_code == 201
    user_id = res.json()["id"]

    res = await client.post(f"{API}/admin/users/{user_id}/identities", json={"issuer": "idp", "subject": "admin"}, headers=ADMIN)
    assert res.status_code == 409

    res = await client.post(f"{API}/admin/users/{user_id}/identities", json={"issuer": "idp", "subject": "u2"}, headers=ADMIN)
    assert res.status_code == 201
    identity_id = res.json()["id"]

    res = await client.post(f"{API}/admin/users/{user_id}/contacts", json={"type": "PHONE", "value": " 555 "}, headers=ADMIN)
    assert res.status_code == 201
    contact = res.json()
    assert contact["value"] == "555" and contact["verified"] is False

    res = await client.post(f"{API}/admin/users/{user_id}/contacts/{contact['id']}/verify", headers=ADMIN)
    assert res.json()["verified"] is True

    res = await client.put(f"{API}/admin/users/{user_id}/status", json={"status": "SUSPENDED"}, headers=ADMIN)
    assert res.json()["status"] == "SUSPENDED"

    res = await client.get(f"{API}/admin/users/{user_id}", headers=ADMIN)
    body = res.json()
    assert [i["id"] for i in body["identities"]] == [identity_id]
    assert len(body["contacts"]) == 1

    res = await client.delete(f"{API}/admin/users/{user_id}/identities/{identity_id}", headers=ADMIN)
    assert res.status_code == 200

    assert (await client.delete(f"{API}/admin/users/{user_id}", headers=ADMIN)).status_code == 200
    assert (await client.get(f"{API}/admin/users/{user_id}", headers=ADMIN)).status_code == 404


async def test_preferences_for_current_user(client):
    res = await client.get(f"{API}/me/preferences/ui", headers=ADMIN)
    assert res.status_code == 200
    assert res.json() == {}

    res = await client.put(f"{API}/me/preferences/ui", json={"theme": "dark", "cols": [1, 2]}, headers=ADMIN)
    assert res.status_code == 200

    res = await client.get(f"{API}/me/preferences/ui", headers=ADMIN)
    assert res.json() == {"theme": "dark", "cols": [1, 2]}
