"""
Integration tests for the HTTP API.
Runs the full application (lifespan included) in echo mode.
"""

import uuid

import pytest
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient

from chatrelay.api.deps import get_message_relay
from chatrelay.core.message_relay import MessageRelay
from chatrelay.llm import GenerationClient, LLMProvider, UpstreamError, MalformedResponse, echo_reply
from chatrelay.main import app
from chatrelay.utils.auth import create_access_token


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _headers_for(user_id):
    token = create_access_token(data={"sub": user_id, "username": f"user-{user_id[:8]}"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice():
    return _headers_for(str(uuid.uuid4()))


@pytest.fixture
def bob():
    return _headers_for(str(uuid.uuid4()))


def _create_session(client, headers, **body):
    response = client.post("/api/chat/sessions", json=body or None, headers=headers)
    assert response.status_code == 200
    return response.json()


def _use_provider(outcome):
    """Route the relay through a provider mock returning ``outcome``."""
    provider = AsyncMock(spec=LLMProvider)
    provider.generate_content.return_value = outcome
    relay = app.state.message_relay
    app.dependency_overrides[get_message_relay] = lambda: MessageRelay(
        relay.session_manager, GenerationClient(provider)
    )


class TestAuthentication:

    def test_signup_login_me(self, client):
        username = f"user_{uuid.uuid4().hex[:8]}"
        signup = client.post("/api/auth/signup", json={"username": username, "password": "secret123"})
        assert signup.status_code == 200
        user_id = signup.json()["user"]["user_id"]

        login = client.post("/api/auth/login", json={"username": username, "password": "secret123"})
        assert login.status_code == 200
        token = login.json()["token"]

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["user"]["user_id"] == user_id
        assert "hashed_password" not in me.json()["user"]

    def test_signup_duplicate_username(self, client):
        username = f"user_{uuid.uuid4().hex[:8]}"
        client.post("/api/auth/signup", json={"username": username, "password": "secret123"})
        again = client.post("/api/auth/signup", json={"username": username, "password": "other123"})
        assert again.status_code == 409

    def test_signup_missing_fields(self, client):
        response = client.post("/api/auth/signup", json={"username": "someone"})
        assert response.status_code == 400
        assert response.json()["error"] == "Missing username or password"

    def test_signup_password_too_long(self, client):
        username = f"user_{uuid.uuid4().hex[:8]}"
        response = client.post("/api/auth/signup", json={"username": username, "password": "x" * 73})
        assert response.status_code == 400

    def test_login_wrong_password(self, client):
        username = f"user_{uuid.uuid4().hex[:8]}"
        client.post("/api/auth/signup", json={"username": username, "password": "secret123"})
        response = client.post("/api/auth/login", json={"username": username, "password": "nope123"})
        assert response.status_code == 401

    def test_missing_bearer(self, client):
        response = client.get("/api/chat/sessions")
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_invalid_bearer(self, client):
        response = client.get("/api/chat/sessions", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401


class TestSessionEndpoints:

    def test_create_list_get_delete(self, client, alice):
        created = _create_session(client, alice)
        assert created["title"] == "New Chat"
        assert created["messages"] == []

        listing = client.get("/api/chat/sessions", headers=alice)
        assert listing.status_code == 200
        assert [s["id"] for s in listing.json()] == [created["id"]]

        fetched = client.get(f"/api/chat/sessions/{created['id']}", headers=alice)
        assert fetched.status_code == 200
        assert fetched.json()["owner"] == created["owner"]

        deleted = client.delete(f"/api/chat/sessions/{created['id']}", headers=alice)
        assert deleted.status_code == 200
        assert client.get("/api/chat/sessions", headers=alice).json() == []
        assert client.get(f"/api/chat/sessions/{created['id']}", headers=alice).status_code == 404
        assert client.delete(f"/api/chat/sessions/{created['id']}", headers=alice).status_code == 404

    def test_create_with_title(self, client, alice):
        created = _create_session(client, alice, title="Recipes")
        assert created["title"] == "Recipes"

    def test_other_user_forbidden(self, client, alice, bob):
        created = _create_session(client, alice)
        assert client.get(f"/api/chat/sessions/{created['id']}", headers=bob).status_code == 403
        assert client.delete(f"/api/chat/sessions/{created['id']}", headers=bob).status_code == 403
        assert client.post(f"/api/chat/sessions/{created['id']}/share", headers=bob).status_code == 403
        assert client.get("/api/chat/sessions", headers=bob).json() == []

    def test_unknown_session(self, client, alice):
        response = client.get(f"/api/chat/sessions/{uuid.uuid4()}", headers=alice)
        assert response.status_code == 404
        assert response.json()["error"] == "Chat session not found"


class TestMessaging:

    def test_echo_scenario(self, client, alice):
        created = _create_session(client, alice)

        response = client.post(
            f"/api/chat/sessions/{created['id']}/messages",
            json={"input": "Hello"},
            headers=alice,
        )

        assert response.status_code == 200
        assert response.json()["reply"] == echo_reply("Hello")
        session = client.get(f"/api/chat/sessions/{created['id']}", headers=alice).json()
        assert len(session["messages"]) == 2
        assert session["title"] == "Hello"

    def test_empty_input(self, client, alice):
        created = _create_session(client, alice)
        response = client.post(
            f"/api/chat/sessions/{created['id']}/messages",
            json={"input": ""},
            headers=alice,
        )
        assert response.status_code == 400
        session = client.get(f"/api/chat/sessions/{created['id']}", headers=alice).json()
        assert session["messages"] == []

    def test_message_in_other_users_session(self, client, alice, bob):
        created = _create_session(client, alice)
        response = client.post(
            f"/api/chat/sessions/{created['id']}/messages",
            json={"input": "Hi"},
            headers=bob,
        )
        assert response.status_code == 403

    def test_upstream_error_payload(self, client, alice):
        created = _create_session(client, alice)
        _use_provider(UpstreamError(404, "model not found", "check the model name"))

        response = client.post(
            f"/api/chat/sessions/{created['id']}/messages",
            json={"input": "Hello"},
            headers=alice,
        )

        assert response.status_code == 502
        body = response.json()
        assert body["error"] == "Upstream API error"
        assert body["upstream_status"] == 404
        assert body["upstream_body"] == "model not found"
        assert body["hint"] == "check the model name"
        session = client.get(f"/api/chat/sessions/{created['id']}", headers=alice).json()
        assert session["messages"] == []

    def test_malformed_response_payload(self, client, alice):
        created = _create_session(client, alice)
        _use_provider(MalformedResponse("{}"))

        response = client.post(
            f"/api/chat/sessions/{created['id']}/messages",
            json={"input": "Hello"},
            headers=alice,
        )

        assert response.status_code == 502
        assert response.json()["data"] == "{}"


class TestSharing:

    def test_share_link_readable_without_auth(self, client, alice, bob):
        created = _create_session(client, alice)
        client.post(
            f"/api/chat/sessions/{created['id']}/messages",
            json={"input": "Hello"},
            headers=alice,
        )

        share = client.post(f"/api/chat/sessions/{created['id']}/share", headers=alice)
        assert share.status_code == 200
        token = share.json()["share_token"]
        assert share.json()["share_url"] == f"https://chat.example.com/share/{token}"

        assert client.get(f"/api/chat/sessions/{created['id']}", headers=bob).status_code == 403

        public = client.get(f"/api/chat/share/{token}")
        assert public.status_code == 200
        body = public.json()
        assert len(body["messages"]) == 2
        assert "owner" not in body
        assert "share_token" not in body

    def test_reshare_retires_old_link(self, client, alice):
        created = _create_session(client, alice)
        first = client.post(f"/api/chat/sessions/{created['id']}/share", headers=alice).json()
        second = client.post(f"/api/chat/sessions/{created['id']}/share", headers=alice).json()

        assert first["share_token"] != second["share_token"]
        assert client.get(f"/api/chat/share/{first['share_token']}").status_code == 404
        assert client.get(f"/api/chat/share/{second['share_token']}").status_code == 200

    def test_unknown_token(self, client):
        response = client.get(f"/api/chat/share/{uuid.uuid4().hex}")
        assert response.status_code == 404

    def test_delete_revokes_share_link(self, client, alice):
        created = _create_session(client, alice)
        token = client.post(f"/api/chat/sessions/{created['id']}/share", headers=alice).json()["share_token"]
        client.delete(f"/api/chat/sessions/{created['id']}", headers=alice)
        assert client.get(f"/api/chat/share/{token}").status_code == 404


class TestAppEndpoints:

    def test_ping(self, client):
        assert client.get("/ping").json() == {"ok": True}

    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["provider"] == "echo"
