"""
Tests for admin token and LINE access token resolution.
"""

from __future__ import annotations

import httpx
import pytest

from spa_booking.application.exceptions import Unauthorized
from spa_booking.domain.entities.principal import AuthContext
from spa_booking.infrastructure.identity.line_identity import LineIdentityResolver


def _resolver(handler, allow_dev_bypass: bool = False) -> LineIdentityResolver:
    return LineIdentityResolver(
        admin_tokens={"secret-admin"},
        api_base_url="https://line.test",
        allow_dev_bypass=allow_dev_bypass,
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


def _profile_handler(request: httpx.Request) -> httpx.Response:
    assert request.url.path == "/v2/profile"
    if request.headers.get("Authorization") == "Bearer good-token":
        return httpx.Response(200, json={"userId": "U123", "displayName": "Alice"})
    return httpx.Response(401, json={"message": "invalid token"})


def test_admin_token_resolves_admin():
    resolver = _resolver(_profile_handler)

    assert resolver.resolve_admin(AuthContext(admin_token="secret-admin")).is_admin
    assert resolver.resolve_admin(AuthContext(admin_token="guess")) is None
    assert resolver.resolve_admin(None) is None


def test_line_token_verified_against_profile():
    principal = _resolver(_profile_handler).resolve_user(AuthContext(line_access_token="good-token"))

    assert principal.role == "user"
    assert principal.user_id == "U123"


def test_rejected_line_token_is_unauthorized():
    with pytest.raises(Unauthorized):
        _resolver(_profile_handler).resolve_user(AuthContext(line_access_token="bad-token"))


def test_network_error_is_unauthorized():
    def handler(request):
        raise httpx.ConnectError("down", request=request)

    with pytest.raises(Unauthorized):
        _resolver(handler).resolve_user(AuthContext(line_access_token="good-token"))


def test_missing_token_needs_dev_bypass():
    with pytest.raises(Unauthorized):
        _resolver(_profile_handler).resolve_user(AuthContext())

    principal = _resolver(_profile_handler, allow_dev_bypass=True).resolve_user(AuthContext())
    assert principal.dev_bypass
    assert principal.user_id is None
