"""
Tests for adapter selection in the composition root.
"""

from __future__ import annotations

import pytest

from spa_booking.core.config import settings
from spa_booking.domain.entities.principal import AuthContext
from spa_booking.infrastructure.identity.line_identity import LineIdentityResolver
from spa_booking.infrastructure.identity.mock_identity import MockIdentityResolver
from spa_booking.wiring.dependencies import get_identity


@pytest.fixture(autouse=True)
def fresh_identity():
    get_identity.cache_clear()
    yield
    get_identity.cache_clear()


def test_local_without_line_uses_token_table(monkeypatch):
    monkeypatch.setattr(settings, "ENV", "dev")
    monkeypatch.setattr(settings, "LINE_CHANNEL_ACCESS_TOKEN", None)
    monkeypatch.setattr(settings, "ADMIN_API_TOKENS", "local-admin")
    monkeypatch.setattr(settings, "DEV_USER_TOKENS", "alice-token:U-alice, bad-entry")

    identity = get_identity()

    assert isinstance(identity, MockIdentityResolver)
    assert identity.resolve_user(AuthContext(line_access_token="alice-token")).user_id == "U-alice"
    assert identity.resolve_admin(AuthContext(admin_token="local-admin")).is_admin


def test_production_verifies_with_line(monkeypatch):
    monkeypatch.setattr(settings, "ENV", "production")
    monkeypatch.setattr(settings, "LINE_CHANNEL_ACCESS_TOKEN", None)

    assert isinstance(get_identity(), LineIdentityResolver)
