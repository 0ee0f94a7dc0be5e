# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

import sqlalchemy as sa
from sqlmodel import Field

from hr_vacations.models.base import TimestampMixin, UUIDBase
from hr_vacations.models.enums import RequestStatus


class VacationRequest(UUIDBase, TimestampMixin, table=True):
    """An employee's vacation request with approval workflow state."""

    __tablename__ = "vacation_requests"
    __table_args__ = (sa.Index("ix_request_employee_status", "employee_id", "status"),)

    employee_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("employees.id"), nullable=False, index=True),
    )
    start_date: date
    end_date: date
    days_requested: int
    type: str = Field(default="vacation", max_length=50, sa_column_kwargs={"server_default": "vacation"})
    reason: str | None = None
    status: str = Field(
        default=RequestStatus.PENDING, max_length=20, index=True, sa_column_kwargs={"server_default": "pending"}
    )
    approved_by: uuid.UUID | None = Field(
        default=None,
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("employees.id"), nullable=True),
    )
    approved_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    notes: str | None = None
