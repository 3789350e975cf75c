"""Tests for login, registration, the user directory and health."""

import pytest
from httpx import AsyncClient

from punchclock.core.security import (create_access_token,
                                      decode_access_token, get_password_hash,
                                      verify_password)
from tests.helpers import auth_headers


# ── Security helpers ────────────────────────────────────────────────
def test_password_hash_round_trip():
    hashed = get_password_hash("s3cret-pass")
    assert hashed != "s3cret-pass"
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("wrong", hashed)


def test_verify_password_rejects_malformed_hash():
    assert verify_password("anything", "not-a-real-hash") is False


def test_access_token_carries_subject():
    token = create_access_token("3f2d9c1e-0000-4000-8000-000000000001")
    payload = decode_access_token(token)
    assert payload["sub"] == "3f2d9c1e-0000-4000-8000-000000000001"
    assert payload["type"] == "access"


def test_tampered_token_is_rejected():
    token = create_access_token("someone")
    assert decode_access_token(token[:-2] + "xx") is None


# ── Login ───────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_login_returns_bearer_token(async_client: AsyncClient, make_user):
    user = await make_user(
        "MEMBER", email="alice@test.local", hashed_password=get_password_hash("password1")
    )
    resp = await async_client.post(
        "/api/v1/auth/login",
        data={"username": "Alice@Test.local", "password": "password1"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["token_type"] == "bearer"
    assert decode_access_token(body["access_token"])["sub"] == user.id


@pytest.mark.asyncio
async def test_login_with_wrong_password(async_client: AsyncClient, make_user):
    await make_user("MEMBER", email="bob@test.local", hashed_password=get_password_hash("password1"))
    resp = await async_client.post(
        "/api/v1/auth/login", data={"username": "bob@test.local", "password": "nope"}
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_login_inactive_user_is_forbidden(async_client: AsyncClient, make_user):
    await make_user(
        "MEMBER",
        email="gone@test.local",
        hashed_password=get_password_hash("password1"),
        is_active=False,
    )
    resp = await async_client.post(
        "/api/v1/auth/login", data={"username": "gone@test.local", "password": "password1"}
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_invalid_token_is_unauthorized(async_client: AsyncClient):
    resp = await async_client.get(
        "/api/v1/users/me", headers={"Authorization": "Bearer not.a.jwt"}
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_token_for_unknown_user_is_unauthorized(async_client: AsyncClient):
    token = create_access_token("3f2d9c1e-0000-4000-8000-0000000000ff")
    resp = await async_client.get(
        "/api/v1/users/me", headers={"Authorization": f"Bearer {token}"}
    )
    assert resp.status_code == 401


# ── Registration ────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_manager_registers_member(async_client: AsyncClient, make_user):
    manager = await make_user("MANAGER")
    lead = await make_user("TEAM_LEAD")
    resp = await async_client.post(
        "/api/v1/auth/register",
        json={
            "email": " New.Hire@Test.local ",
            "password": "welcome1",
            "full_name": "New Hire",
            "manager_id": lead.id,
        },
        headers=auth_headers(manager),
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["email"] == "new.hire@test.local"
    assert data["role"] == "MEMBER"
    assert data["manager_id"] == lead.id
    assert "hashed_password" not in data

    login = await async_client.post(
        "/api/v1/auth/login", data={"username": "new.hire@test.local", "password": "welcome1"}
    )
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_register_duplicate_email_conflicts(async_client: AsyncClient, make_user):
    manager = await make_user("ADMIN")
    await make_user("MEMBER", email="taken@test.local")
    resp = await async_client.post(
        "/api/v1/auth/register",
        json={"email": "taken@test.local", "password": "welcome1", "full_name": "Dup User"},
        headers=auth_headers(manager),
    )
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_register_unknown_manager_is_rejected(async_client: AsyncClient, make_user):
    manager = await make_user("MANAGER")
    resp = await async_client.post(
        "/api/v1/auth/register",
        json={
            "email": "orphan@test.local",
            "password": "welcome1",
            "full_name": "Orphan",
            "manager_id": "3f2d9c1e-0000-4000-8000-0000000000aa",
        },
        headers=auth_headers(manager),
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_register_bad_role_is_unprocessable(async_client: AsyncClient, make_user):
    manager = await make_user("MANAGER")
    resp = await async_client.post(
        "/api/v1/auth/register",
        json={"email": "x@test.local", "password": "welcome1", "full_name": "X Y", "role": "CEO"},
        headers=auth_headers(manager),
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_member_cannot_register(async_client: AsyncClient, make_user):
    member = await make_user("MEMBER")
    resp = await async_client.post(
        "/api/v1/auth/register",
        json={"email": "y@test.local", "password": "welcome1", "full_name": "Y Z"},
        headers=auth_headers(member),
    )
    assert resp.status_code == 403


# ── Directory ───────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_users_me(async_client: AsyncClient, make_user):
    member = await make_user("MEMBER", full_name="Me Myself")
    resp = await async_client.get("/api/v1/users/me", headers=auth_headers(member))
    assert resp.status_code == 200
    assert resp.json()["id"] == member.id
    assert resp.json()["full_name"] == "Me Myself"


@pytest.mark.asyncio
async def test_user_listing_is_scoped(async_client: AsyncClient, make_user):
    admin = await make_user("ADMIN")
    lead = await make_user("TEAM_LEAD")
    report = await make_user("MEMBER", manager_id=lead.id)
    await make_user("MEMBER")

    everyone = await async_client.get("/api/v1/users", headers=auth_headers(admin))
    assert everyone.json()["total"] == 4

    team = await async_client.get("/api/v1/users", headers=auth_headers(lead))
    assert {u["id"] for u in team.json()["items"]} == {lead.id, report.id}

    alone = await async_client.get("/api/v1/users", headers=auth_headers(report))
    assert [u["id"] for u in alone.json()["items"]] == [report.id]


@pytest.mark.asyncio
async def test_user_lookup_allowed_within_scope(async_client: AsyncClient, make_user):
    manager = await make_user("MANAGER")
    lead = await make_user("TEAM_LEAD")
    report = await make_user("MEMBER", manager_id=lead.id, full_name="Direct Report")

    by_manager = await async_client.get(f"/api/v1/users/{report.id}", headers=auth_headers(manager))
    assert by_manager.status_code == 200
    assert by_manager.json()["full_name"] == "Direct Report"

    by_lead = await async_client.get(f"/api/v1/users/{report.id}", headers=auth_headers(lead))
    assert by_lead.status_code == 200
    assert by_lead.json()["manager_id"] == lead.id

    by_self = await async_client.get(f"/api/v1/users/{report.id}", headers=auth_headers(report))
    assert by_self.status_code == 200
    assert by_self.json()["id"] == report.id


@pytest.mark.asyncio
async def test_user_lookup_forbidden_outside_scope(async_client: AsyncClient, make_user):
    lead = await make_user("TEAM_LEAD")
    outsider = await make_user("MEMBER")
    member = await make_user("MEMBER")

    resp = await async_client.get(f"/api/v1/users/{outsider.id}", headers=auth_headers(lead))
    assert resp.status_code == 403
    assert resp.json()["success"] is False

    peer = await async_client.get(f"/api/v1/users/{outsider.id}", headers=auth_headers(member))
    assert peer.status_code == 403

    # Scope is checked before existence, so unknown ids look forbidden too
    unknown = await async_client.get(
        "/api/v1/users/3f2d9c1e-0000-4000-8000-0000000000ee", headers=auth_headers(member)
    )
    assert unknown.status_code == 403


@pytest.mark.asyncio
async def test_user_lookup_unknown_or_malformed_id(async_client: AsyncClient, make_user):
    admin = await make_user("ADMIN")
    headers = auth_headers(admin)

    missing = await async_client.get(
        "/api/v1/users/3f2d9c1e-0000-4000-8000-0000000000ee", headers=headers
    )
    assert missing.status_code == 404

    malformed = await async_client.get("/api/v1/users/not-a-uuid", headers=headers)
    assert malformed.status_code == 400


# ── Health ──────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_health_reports_ready(async_client: AsyncClient):
    resp = await async_client.get("/api/v1/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["readiness"] == "ready"
    assert body["dependencies"] == {"database": "up"}
