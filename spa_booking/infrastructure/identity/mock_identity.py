from __future__ import annotations

from spa_booking.application.exceptions import Unauthorized
from spa_booking.application.ports.identity import IdentityPort
from spa_booking.domain.entities.principal import AuthContext, Principal


class MockIdentityResolver(IdentityPort):
    """Token-to-user table for local runs and tests. No network."""

    def __init__(
        self,
        admin_tokens: set[str] | None = None,
        user_tokens: dict[str, str] | None = None,
        allow_dev_bypass: bool = False,
    ) -> None:
        self._admin_tokens = set(admin_tokens or ())
        self._user_tokens = dict(user_tokens or {})
        self._allow_dev_bypass = allow_dev_bypass

    def resolve_admin(self, auth: AuthContext | None) -> Principal | None:
        if auth and auth.admin_token and auth.admin_token in self._admin_tokens:
            return Principal(role="admin")
        return None

    def resolve_user(self, auth: AuthContext | None) -> Principal:
        token = auth.line_access_token if auth else None
        if not token:
            if self._allow_dev_bypass:
                return Principal(role="user", dev_bypass=True)
            raise Unauthorized("Missing LINE access token.")
        user_id = self._user_tokens.get(token)
        if not user_id:
            raise Unauthorized("Invalid LINE access token.")
        return Principal(role="user", user_id=user_id)
