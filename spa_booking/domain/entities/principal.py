from dataclasses import dataclass


@dataclass(frozen=True)
class AuthContext:
    """Raw caller credentials as received from the client."""

    admin_token: str | None = None
    line_access_token: str | None = None


@dataclass(frozen=True)
class Principal:
    role: str  # "admin", "employee", "user"
    user_id: str | None = None
    employee_id: str | None = None
    dev_bypass: bool = False

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
