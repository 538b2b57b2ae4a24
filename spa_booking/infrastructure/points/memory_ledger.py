from __future__ import annotations

import logging
import threading

from spa_booking.application.ports.point_ledger import PointLedgerPort
from spa_booking.application.ports.settings_store import SettingsStorePort


class MemoryPointLedger(PointLedgerPort):
    def __init__(self, settings_store: SettingsStorePort) -> None:
        self._settings = settings_store
        self._balances: dict[str, int] = {}
        self._history: list[dict[str, object]] = []
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def balance(self, user_id: str) -> int:
        return self._balances.get(user_id, 0)

    def award_for_purchase(self, user_id: str, amount: int) -> int:
        point_settings = self._settings.get_point_settings()
        if not point_settings.enable_purchase_points or point_settings.points_per_currency <= 0:
            return 0
        return self._credit(user_id, amount // point_settings.points_per_currency, "purchase")

    def award_for_visit(self, user_id: str) -> int:
        point_settings = self._settings.get_point_settings()
        if not point_settings.enable_visit_points:
            return 0
        return self._credit(user_id, point_settings.points_per_visit, "visit")

    def _credit(self, user_id: str, points: int, kind: str) -> int:
        if points <= 0:
            return 0
        with self._lock:
            self._balances[user_id] = self._balances.get(user_id, 0) + points
            self._history.append({"user_id": user_id, "points": points, "kind": kind})
        self._logger.info("Points awarded", extra={"user_id": user_id, "reason": f"{kind}:{points}"})
        return points
