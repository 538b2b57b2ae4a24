from __future__ import annotations

import logging

import httpx


class TelegramClient:
    def __init__(self, bot_token: str, chat_id: str) -> None:
        self._endpoint = f"https://api.telegram.org/bot{bot_token}/sendMessage"
        self._chat_id = chat_id
        self._client = httpx.Client(timeout=10.0)
        self._logger = logging.getLogger(__name__)

    def send_text(self, text: str) -> None:
        resp = self._client.post(self._endpoint, json={"chat_id": self._chat_id, "text": text})
        if resp.status_code >= 400:
            self._logger.error("Telegram send failed", extra={"status": resp.status_code, "error": resp.text[:200]})
            resp.raise_for_status()
