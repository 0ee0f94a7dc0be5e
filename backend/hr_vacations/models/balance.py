# ruff: noqa: TC003
from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlmodel import Field

from hr_vacations.models.base import TimestampMixin, UUIDBase

DEFAULT_ALLOTMENT_DAYS = 25


class VacationBalance(UUIDBase, TimestampMixin, table=True):
    """Per employee, per year allotment. remaining_days == total_days - used_days."""

    __tablename__ = "vacation_balances"
    __table_args__ = (sa.UniqueConstraint("employee_id", "year", name="uq_balance_employee_year"),)

    employee_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("employees.id"), nullable=False, index=True),
    )
    year: int
    total_days: int = Field(
        default=DEFAULT_ALLOTMENT_DAYS, sa_column_kwargs={"server_default": str(DEFAULT_ALLOTMENT_DAYS)}
    )
    used_days: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    remaining_days: int = Field(
        default=DEFAULT_ALLOTMENT_DAYS, sa_column_kwargs={"server_default": str(DEFAULT_ALLOTMENT_DAYS)}
    )
