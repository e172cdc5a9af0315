"""
Comptoir Actor Primitive — Application Users
==============================================
Users are reference data: the login screen looks them up, commands
carry their user_id as actor_id. No password or permission is
enforced here.

Roles:
    ADMIN       — everything, including settings and users
    SALES       — quotes, invoices, delivery notes, client payments
    STOCK       — products, inventory counts, stock journal
    ACCOUNTANT  — payments, expenses, statements, cash register
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(Enum):
    ADMIN = "ADMIN"
    SALES = "SALES"
    STOCK = "STOCK"
    ACCOUNTANT = "ACCOUNTANT"


@dataclass(frozen=True)
class User:
    user_id: str
    name: str
    email: str
    role: Role = Role.SALES
    active: bool = True

    def __post_init__(self):
        if not self.user_id or not isinstance(self.user_id, str):
            raise ValueError("user_id must be a non-empty string.")
        if not self.name or not isinstance(self.name, str):
            raise ValueError("name must be a non-empty string.")
        if not self.email or "@" not in self.email:
            raise ValueError("email must be a valid address.")
        if not isinstance(self.role, Role):
            raise ValueError("role must be Role enum.")

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "active": self.active,
        }

    @classmethod
    def from_dict(cls, data: dict) -> User:
        return cls(
            user_id=data["user_id"],
            name=data["name"],
            email=data["email"],
            role=Role(data.get("role", "SALES")),
            active=data.get("active", True),
        )
