from abc import ABC, abstractmethod


class PointLedgerPort(ABC):
    @abstractmethod
    def award_for_purchase(self, user_id: str, amount: int) -> int:
        """Award purchase points. Returns points awarded."""
        raise NotImplementedError

    @abstractmethod
    def award_for_visit(self, user_id: str) -> int:
        """Award visit points. Returns points awarded."""
        raise NotImplementedError
