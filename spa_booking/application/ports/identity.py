from __future__ import annotations

from abc import ABC, abstractmethod

from spa_booking.domain.entities.principal import AuthContext, Principal


class IdentityPort(ABC):
    @abstractmethod
    def resolve_admin(self, auth: AuthContext | None) -> Principal | None:
        """Return an admin principal if the admin credential verifies, else None."""
        raise NotImplementedError

    @abstractmethod
    def resolve_user(self, auth: AuthContext | None) -> Principal:
        """Return the end-user principal. Raises Unauthorized if the credential does not verify."""
        raise NotImplementedError


class EmployeeDirectoryPort(ABC):
    @abstractmethod
    def find_employee_id(self, line_user_id: str) -> str | None:
        raise NotImplementedError
