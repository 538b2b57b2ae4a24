from __future__ import annotations

from spa_booking.application.exceptions import Unauthorized
from spa_booking.application.ports.identity import EmployeeDirectoryPort, IdentityPort
from spa_booking.domain.entities.booking import Booking
from spa_booking.domain.entities.principal import AuthContext, Principal


class Authorizer:
    def __init__(self, identity: IdentityPort, employees: EmployeeDirectoryPort) -> None:
        self._identity = identity
        self._employees = employees

    def require_admin(self, auth: AuthContext | None) -> Principal:
        principal = self._identity.resolve_admin(auth)
        if principal is None:
            raise Unauthorized("Admin access denied.")
        return principal

    def require_customer_or_admin(self, auth: AuthContext | None) -> Principal:
        """Admin bypass first, then a verified end user."""
        principal = self._identity.resolve_admin(auth)
        if principal is not None:
            return principal
        return self._identity.resolve_user(auth)

    def require_staff(self, auth: AuthContext | None) -> Principal:
        """Admin, or an end user registered in the employee directory."""
        principal = self._identity.resolve_admin(auth)
        if principal is not None:
            return principal
        user = self._identity.resolve_user(auth)
        if not user.user_id:
            raise Unauthorized("Missing LINE user.")
        employee_id = self._employees.find_employee_id(user.user_id)
        if not employee_id:
            raise Unauthorized("Employee access denied.")
        return Principal(role="employee", user_id=user.user_id, employee_id=employee_id)

    def require_staff_or_owner(self, auth: AuthContext | None, booking: Booking) -> Principal:
        principal = self._identity.resolve_admin(auth)
        if principal is not None:
            return principal
        user = self._identity.resolve_user(auth)
        if user.user_id and booking.user_id and user.user_id == booking.user_id:
            return user
        if user.user_id:
            employee_id = self._employees.find_employee_id(user.user_id)
            if employee_id:
                return Principal(role="employee", user_id=user.user_id, employee_id=employee_id)
        raise Unauthorized("Unauthorized.")

    def require_owner(self, auth: AuthContext | None, booking: Booking) -> Principal:
        user = self._identity.resolve_user(auth)
        if not user.user_id or user.user_id != booking.user_id:
            raise Unauthorized("Unauthorized.")
        return user
