"""
End-to-end tests through the HTTP surface.
"""

import pytest
from unittest.mock import AsyncMock

from sqlalchemy.exc import DataError, OperationalError

from auth.errors import StoreUnavailable
from auth.jwt import TokenSigner
from config.settings import config


async def _signup(client, payload):
    return await client.post("/api/auth/signup", json=payload)


class TestSignupEndpoint:
    @pytest.mark.asyncio
    async def test_signup_me_and_bad_login(self, client, alice):
        resp = await _signup(client, alice)
        assert resp.status_code == 201
        body = resp.json()
        assert body["success"] is True
        assert body["user"]["username"] == "alice"
        assert "password_hash" not in body["user"]
        token = body["token"]

        resp = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        user = resp.json()["user"]
        assert user["username"] == "alice"
        assert user["email"] == "alice@x.com"

        resp = await client.post(
            "/api/auth/login", json={"email": "alice@x.com", "password": "wrongpw"}
        )
        assert resp.status_code == 401
        assert resp.json()["success"] is False

    @pytest.mark.asyncio
    async def test_short_username(self, client):
        resp = await _signup(client, {"username": "al", "email": "al@x.com", "password": "secret1"})
        assert resp.status_code == 400
        assert resp.json() == {
            "success": False,
            "message": "Username must be at least 3 characters",
        }

    @pytest.mark.asyncio
    async def test_duplicate_email_and_username(self, client, alice):
        assert (await _signup(client, alice)).status_code == 201

        same_email = dict(alice, username="alice2")
        resp = await _signup(client, same_email)
        assert resp.status_code == 409
        assert resp.json()["success"] is False

        same_username = dict(alice, email="alice2@x.com")
        assert (await _signup(client, same_username)).status_code == 409

    @pytest.mark.asyncio
    async def test_non_json_body(self, client):
        resp = await client.post(
            "/api/auth/signup",
            content=b"not json",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 400
        assert resp.json()["success"] is False


class TestLoginEndpoint:
    @pytest.mark.asyncio
    async def test_login_success(self, client, alice):
        await _signup(client, alice)
        resp = await client.post(
            "/api/auth/login", json={"email": alice["email"], "password": alice["password"]}
        )
        assert resp.status_code == 200
        assert resp.json()["user"]["email"] == "alice@x.com"

    @pytest.mark.asyncio
    async def test_unknown_email_matches_wrong_password(self, client, alice):
        await _signup(client, alice)
        unknown = await client.post(
            "/api/auth/login", json={"email": "nonexistent@x.com", "password": "anything"}
        )
        wrong = await client.post(
            "/api/auth/login", json={"email": "alice@x.com", "password": "wrongpassword"}
        )
        assert unknown.status_code == wrong.status_code == 401
        assert unknown.json() == wrong.json()


class TestSessionGate:
    @pytest.mark.asyncio
    async def test_no_token(self, client):
        resp = await client.get("/api/auth/me")
        assert resp.status_code == 401
        assert resp.json() == {"success": False, "message": "Access denied. No token provided."}

    @pytest.mark.asyncio
    async def test_wrong_scheme_counts_as_no_token(self, client):
        resp = await client.get("/api/auth/me", headers={"Authorization": "Basic abc"})
        assert resp.status_code == 401
        assert "No token" in resp.json()["message"]

    @pytest.mark.asyncio
    async def test_garbage_token(self, client):
        resp = await client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
        assert resp.status_code == 401
        assert resp.json()["message"] == "Invalid or expired token."

    @pytest.mark.asyncio
    async def test_expired_token(self, client, alice):
        user_id = (await _signup(client, alice)).json()["user"]["id"]
        signer = TokenSigner(config.jwt_secret, config.jwt_expiry_seconds)
        stale = signer.issue(user_id, now=0)
        resp = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {stale}"})
        assert resp.status_code == 401
        assert resp.json()["message"] == "Invalid or expired token."


class TestServiceRoutes:
    @pytest.mark.asyncio
    async def test_health(self, client):
        resp = await client.get("/")
        assert resp.status_code == 200
        assert resp.json()["database"] == "connected"

    @pytest.mark.asyncio
    async def test_routing_check(self, client):
        assert (await client.get("/api/test")).json() == {"message": "API routing works!"}

    @pytest.mark.asyncio
    async def test_unknown_route(self, client):
        resp = await client.get("/api/nope")
        assert resp.status_code == 404
        assert resp.json() == {
            "success": False,
            "message": "Route not found",
            "method": "GET",
            "path": "/api/nope",
        }


class TestInputLimits:
    @pytest.mark.asyncio
    async def test_overlong_password_is_a_validation_error(self, client):
        resp = await _signup(client, {"username": "alice", "email": "alice@x.com", "password": "x" * 80})
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "message": "Password must be at most 72 bytes"}

    @pytest.mark.asyncio
    async def test_overlong_username_is_a_validation_error(self, client):
        resp = await _signup(client, {"username": "a" * 65, "email": "alice@x.com", "password": "secret1"})
        assert resp.status_code == 400
        assert resp.json()["success"] is False

    @pytest.mark.asyncio
    async def test_overlong_login_password_is_rejected(self, client, alice):
        await _signup(client, dict(alice, password="x" * 72))
        resp = await client.post(
            "/api/auth/login", json={"email": alice["email"], "password": "x" * 72 + "extra"}
        )
        assert resp.status_code == 401


class TestServerErrors:
    @pytest.mark.asyncio
    async def test_store_unavailable_is_503(self, stub_service_client):
        client, service = stub_service_client
        service.login = AsyncMock(side_effect=StoreUnavailable())
        resp = await client.post("/api/auth/login", json={"email": "a@x.com", "password": "secret1"})
        assert resp.status_code == 503
        assert resp.json() == {
            "success": False,
            "message": "Service temporarily unavailable, please retry",
        }

    @pytest.mark.asyncio
    async def test_raw_operational_error_is_503(self, stub_service_client):
        client, service = stub_service_client
        service.login = AsyncMock(
            side_effect=OperationalError("SELECT 1", {}, Exception("connection refused on db-host:5432"))
        )
        resp = await client.post("/api/auth/login", json={"email": "a@x.com", "password": "secret1"})
        assert resp.status_code == 503
        assert resp.json()["success"] is False
        assert "db-host" not in resp.text

    @pytest.mark.asyncio
    async def test_data_error_is_500_not_503(self, stub_service_client):
        client, service = stub_service_client
        service.signup = AsyncMock(
            side_effect=DataError("INSERT INTO users", {}, Exception("value too long for type character varying(64)"))
        )
        resp = await client.post(
            "/api/auth/signup", json={"username": "alice", "email": "a@x.com", "password": "secret1"}
        )
        assert resp.status_code == 500
        assert resp.json() == {"success": False, "message": "Internal server error"}

    @pytest.mark.asyncio
    async def test_unexpected_error_does_not_leak(self, stub_service_client):
        client, service = stub_service_client
        service.login = AsyncMock(side_effect=RuntimeError("hash backend exploded at /srv/secret"))
        resp = await client.post("/api/auth/login", json={"email": "a@x.com", "password": "secret1"})
        assert resp.status_code == 500
        assert resp.json() == {"success": False, "message": "Internal server error"}
        assert "/srv/secret" not in resp.text
