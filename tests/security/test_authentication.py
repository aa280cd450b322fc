"""
Security tests for authentication and route protection

The console decodes tokens without verifying them, for display and routing
only. These tests pin down what that does and does not allow.
"""

import base64
import json
from datetime import timedelta

import pytest
from jose import jwt

from registry_console.core.session import SessionState
from registry_console.web.routing import resolve_route
from tests.utils.factories import TokenFactory

# Mark all tests in this module as security tests
pytestmark = pytest.mark.security


def _with_payload(token: str, payload: bytes) -> str:
    header, _, signature = token.split(".")
    body = base64.urlsafe_b64encode(payload).rstrip(b"=").decode("ascii")
    return f"{header}.{body}.{signature}"


class TestTokenHandling:
    """Test how received and stored tokens are treated"""

    def test_foreign_signature_is_display_only(self, session_manager):
        """A token signed by another key still decodes; the service re-checks it"""
        forged = jwt.encode(
            {"user": {"id": "u-9"}, "exp": 4102444800},
            "some-other-key",
            algorithm="HS256",
        )

        assert session_manager.set_token(forged) is SessionState.LOGGED_IN
        assert session_manager.user == {"id": "u-9"}

    def test_tampered_payload_is_rejected(self, session_manager, memory_store, valid_token):
        tampered = _with_payload(valid_token, b"{not json")

        assert session_manager.set_token(tampered) is SessionState.LOGGED_OUT
        assert memory_store.get("token") is None

    def test_tampered_stored_token_logs_out(self, session_manager, memory_store, valid_token):
        memory_store.set("token", _with_payload(valid_token, json.dumps({"user": {}}).encode()))

        assert session_manager.restore() is SessionState.LOGGED_OUT
        assert memory_store.get("token") is None

    def test_token_without_expiry_is_rejected(self, session_manager):
        token = TokenFactory.create_token_without_expiry()

        assert session_manager.set_token(token) is SessionState.LOGGED_OUT

    def test_expired_login_token_is_not_persisted(self, session_manager, memory_store):
        token = TokenFactory.create_token(expires_in=timedelta(seconds=-1))

        assert session_manager.set_token(token) is SessionState.LOGGED_OUT
        assert memory_store.get("token") is None

    def test_replacing_session_with_bad_token_logs_out(self, session_manager, valid_token):
        session_manager.set_token(valid_token)

        session_manager.set_token("garbage")

        assert session_manager.state is SessionState.LOGGED_OUT
        assert session_manager.token is None


class TestCredentialExposure:
    """Test that credentials are not echoed or sent where they should not be"""

    def test_password_not_echoed_after_failure(self, client):
        response = client.post(
            "/login", json={"email": "clerk@registry.test", "password": "wrong-pass"}
        )

        assert "wrong-pass" not in response.text

    @pytest.mark.asyncio
    async def test_no_bearer_after_logout(self, console, registry_server, valid_token):
        console.session.set_token(valid_token)
        console.session.logout()

        await console.api.get_owners()
        await console.aclose()

        assert "Authorization" not in registry_server.requests[-1].headers

    @pytest.mark.asyncio
    async def test_bearer_follows_session(self, console, registry_server, valid_token):
        console.session.set_token(valid_token)

        await console.api.get_lands()
        await console.aclose()

        assert registry_server.requests[-1].headers["Authorization"] == f"Bearer {valid_token}"


class TestRouteProtection:
    """Test that look-alike paths do not get past the guard"""

    @pytest.mark.parametrize("path", ["/dashboardx", "/DASHBOARD", "/dash", "/api/dashboard"])
    def test_logged_out_look_alikes(self, path):
        decision = resolve_route(SessionState.LOGGED_OUT, path)

        assert decision.redirected
        assert decision.destination == "/login"

    @pytest.mark.parametrize("path", ["/loginx", "/register/extra", "/dashboardx"])
    def test_logged_in_look_alikes(self, path):
        decision = resolve_route(SessionState.LOGGED_IN, path)

        assert decision.redirected
        assert decision.destination == "/dashboard"

    def test_query_string_does_not_bypass(self, client):
        response = client.get("/dashboard?view=login")

        assert response.status_code == 303
        assert response.headers["location"] == "/login"
