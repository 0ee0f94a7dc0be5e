# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel


class BalanceResponse(BaseModel):
    """Vacation balance for one employee and year."""

    employee_id: uuid.UUID
    year: int
    total_days: int
    used_days: int
    remaining_days: int
    updated_at: datetime
