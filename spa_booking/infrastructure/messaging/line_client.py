from __future__ import annotations

import logging

import httpx


class LineMessagingClient:
    def __init__(self, channel_access_token: str, api_base_url: str = "https://api.line.me") -> None:
        self._base_url = api_base_url.rstrip("/")
        self._client = httpx.Client(
            timeout=10.0,
            headers={"Authorization": f"Bearer {channel_access_token}"},
        )
        self._logger = logging.getLogger(__name__)

    def push_text(self, to: str, text: str) -> None:
        self._post("/v2/bot/message/push", {"to": to, "messages": [{"type": "text", "text": text}]})

    def multicast_text(self, to: list[str], text: str) -> None:
        if not to:
            return
        self._post("/v2/bot/message/multicast", {"to": to, "messages": [{"type": "text", "text": text}]})

    def _post(self, path: str, payload: dict) -> None:
        resp = self._client.post(f"{self._base_url}{path}", json=payload)
        if resp.status_code >= 400:
            try:
                error_message = resp.json().get("message")
            except ValueError:
                error_message = resp.text
            self._logger.error(
                "LINE send failed",
                extra={"status": resp.status_code, "error": error_message, "reason": path},
            )
            resp.raise_for_status()
