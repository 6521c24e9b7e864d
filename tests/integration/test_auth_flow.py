"""Integration tests: registration, login and profile over HTTP."""

from httpx import AsyncClient

from tests.helpers import register


async def test_health(client: AsyncClient) -> None:
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


async def test_register_returns_user_and_token(client: AsyncClient) -> None:
    resp = await client.post(
        "/api/v1/register",
        json={
            "full_name": "Awa Provider",
            "phone": "+22990000001",
            "password": "secret1",
            "user_type": "provider",
            "email": "awa@example.com",
        },
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["code"] == 0
    assert body["data"]["user"]["user_type"] == "provider"
    assert body["data"]["user"]["balance"] == 0
    assert body["data"]["token"]
    assert "password_hash" not in body["data"]["user"]
    assert resp.headers["X-Request-ID"] == body["request_id"]


async def test_duplicate_phone_conflict(client: AsyncClient) -> None:
    await register(client, "+22990000001")
    resp = await client.post(
        "/api/v1/register",
        json={"full_name": "Again", "phone": "+22990000001", "password": "secret1"},
    )
    assert resp.status_code == 409
    assert resp.json()["code"] == 1001
    assert resp.json()["success"] is False


async def test_invalid_body_is_422(client: AsyncClient) -> None:
    resp = await client.post(
        "/api/v1/register", json={"full_name": "X", "phone": "abc", "password": "1"}
    )
    assert resp.status_code == 422


async def test_login(client: AsyncClient) -> None:
    await register(client, "+22990000001")
    resp = await client.post(
        "/api/v1/login", json={"phone": "+22990000001", "password": "secret1"}
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["token"]


async def test_login_unknown_phone_vs_wrong_password(client: AsyncClient) -> None:
    await register(client, "+22990000001")
    unknown = await client.post(
        "/api/v1/login", json={"phone": "+22999999999", "password": "secret1"}
    )
    wrong = await client.post(
        "/api/v1/login", json={"phone": "+22990000001", "password": "nope"}
    )
    assert (unknown.status_code, unknown.json()["code"]) == (404, 1004)
    assert (wrong.status_code, wrong.json()["code"]) == (401, 1003)


async def test_profile_requires_token(client: AsyncClient) -> None:
    assert (await client.get("/api/v1/user/profile")).status_code == 401
    resp = await client.get(
        "/api/v1/user/profile", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert resp.status_code == 401


async def test_get_and_update_profile(client: AsyncClient) -> None:
    user, headers = await register(client, "+22990000001")
    resp = await client.get("/api/v1/user/profile", headers=headers)
    assert resp.json()["data"]["id"] == user["id"]

    resp = await client.put(
        "/api/v1/user/profile", json={"full_name": "Renamed"}, headers=headers
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["full_name"] == "Renamed"
