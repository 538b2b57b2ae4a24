from __future__ import annotations

from typing import Any

from spa_booking.application.ports.identity import EmployeeDirectoryPort


class MemoryEmployeeDirectory(EmployeeDirectoryPort):
    def __init__(self, employees: dict[str, str] | None = None) -> None:
        # LINE user id -> employee id
        self._employees = dict(employees or {})

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> "MemoryEmployeeDirectory":
        employees = {}
        for employee_id, doc in (data.get("employees") or {}).items():
            line_user_id = doc.get("lineUserId")
            if line_user_id and doc.get("status", "active") == "active":
                employees[line_user_id] = employee_id
        return cls(employees)

    def add(self, line_user_id: str, employee_id: str) -> None:
        self._employees[line_user_id] = employee_id

    def find_employee_id(self, line_user_id: str) -> str | None:
        return self._employees.get(line_user_id)
