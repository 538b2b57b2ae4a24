from __future__ import annotations

import hmac
import logging

import httpx

from spa_booking.application.exceptions import Unauthorized
from spa_booking.application.ports.identity import IdentityPort
from spa_booking.domain.entities.principal import AuthContext, Principal


class LineIdentityResolver(IdentityPort):
    """
    Admins present a static bearer token from configuration.
    End users present a LINE access token, verified against the LINE profile endpoint.
    """

    def __init__(
        self,
        admin_tokens: set[str],
        api_base_url: str = "https://api.line.me",
        allow_dev_bypass: bool = False,
        client: httpx.Client | None = None,
    ) -> None:
        self._admin_tokens = set(admin_tokens)
        self._profile_url = f"{api_base_url.rstrip('/')}/v2/profile"
        self._allow_dev_bypass = allow_dev_bypass
        self._client = client or httpx.Client(timeout=10.0)
        self._logger = logging.getLogger(__name__)

    def resolve_admin(self, auth: AuthContext | None) -> Principal | None:
        token = auth.admin_token if auth else None
        if not token:
            return None
        for candidate in self._admin_tokens:
            if hmac.compare_digest(candidate, token):
                return Principal(role="admin")
        self._logger.warning("Admin token rejected")
        return None

    def resolve_user(self, auth: AuthContext | None) -> Principal:
        token = auth.line_access_token if auth else None
        if not token:
            if self._allow_dev_bypass:
                self._logger.warning("Dev auth bypass used; no LINE token supplied")
                return Principal(role="user", dev_bypass=True)
            raise Unauthorized("Missing LINE access token.")
        return Principal(role="user", user_id=self._fetch_user_id(token))

    def _fetch_user_id(self, access_token: str) -> str:
        try:
            resp = self._client.get(self._profile_url, headers={"Authorization": f"Bearer {access_token}"})
        except httpx.HTTPError as e:
            self._logger.error("LINE profile request failed", extra={"error": str(e)})
            raise Unauthorized("Invalid LINE access token.") from e

        if resp.status_code >= 400:
            self._logger.warning(
                "LINE token verification failed",
                extra={"status": resp.status_code, "error": resp.text[:200]},
            )
            raise Unauthorized("Invalid LINE access token.")

        user_id = resp.json().get("userId")
        if not user_id:
            raise Unauthorized("Invalid LINE access token.")
        return user_id
