# ruff: noqa: TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel

from hr_vacations.models.enums import Role


class AuthContext(BaseModel):
    """Caller identity resolved by the authentication layer."""

    user_id: uuid.UUID
    role: Role = Role.EMPLOYEE

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
