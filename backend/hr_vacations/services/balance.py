"""Balance ledger: one row per (employee, year) with total, used and remaining days."""

# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import Insert, insert, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlmodel import col

from hr_vacations.config import get_settings
from hr_vacations.models.balance import VacationBalance
from hr_vacations.models.base import _now_utc, _uuid_factory
from hr_vacations.schemas.balance import BalanceResponse
from hr_vacations.services.employee import _get_employee_or_404, get_employee_for_user

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from hr_vacations.schemas.auth import AuthContext


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_balance_response(balance: VacationBalance) -> BalanceResponse:
    """Map a balance model to its response schema."""
    return BalanceResponse(
        employee_id=balance.employee_id,
        year=balance.year,
        total_days=balance.total_days,
        used_days=balance.used_days,
        remaining_days=balance.remaining_days,
        updated_at=balance.updated_at,
    )


async def _find_balance(
    session: AsyncSession,
    employee_id: uuid.UUID,
    year: int,
    for_update: bool = False,
) -> VacationBalance | None:
    query = select(VacationBalance).where(
        col(VacationBalance.employee_id) == employee_id,
        col(VacationBalance.year) == year,
    )
    if for_update:
        query = query.with_for_update()
    result = await session.execute(query)
    return result.scalar_one_or_none()


def _insert_if_absent(session: AsyncSession, values: dict[str, object]) -> Insert:
    """Build an INSERT that is a no-op when the (employee_id, year) row exists."""
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(VacationBalance).values(**values).on_conflict_do_nothing(
            index_elements=["employee_id", "year"]
        )
    if dialect == "sqlite":
        return sqlite.insert(VacationBalance).values(**values).on_conflict_do_nothing(
            index_elements=["employee_id", "year"]
        )
    return insert(VacationBalance).values(**values)


# ---------------------------------------------------------------------------
# Ledger operations
# ---------------------------------------------------------------------------


async def get_or_create_balance(
    session: AsyncSession,
    employee_id: uuid.UUID,
    year: int,
    *,
    for_update: bool = False,
) -> VacationBalance:
    """Return the balance row for (employee, year), creating it with the default allotment.

    Two callers racing on the first access both issue the insert; the unique
    constraint lets exactly one through and the other re-reads the winner's row.
    """
    balance = await _find_balance(session, employee_id, year, for_update=for_update)
    if balance is not None:
        return balance

    allotment = get_settings().default_allotment_days
    now = _now_utc()
    await session.execute(
        _insert_if_absent(
            session,
            {
                "id": _uuid_factory(),
                "employee_id": employee_id,
                "year": year,
                "total_days": allotment,
                "used_days": 0,
                "remaining_days": allotment,
                "created_at": now,
                "updated_at": now,
            },
        )
    )

    balance = await _find_balance(session, employee_id, year, for_update=for_update)
    if balance is None:
        msg = f"Balance row for employee {employee_id} year {year} vanished after insert"
        raise RuntimeError(msg)
    return balance


def settle_approval(balance: VacationBalance, days: int) -> None:
    """Consume ``days`` from the balance. Caller owns the transaction.

    No floor is enforced here; the lifecycle decides whether over-commitment
    is allowed.
    """
    balance.used_days += days
    balance.remaining_days = balance.total_days - balance.used_days


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


async def get_current_balance(
    session: AsyncSession,
    auth: AuthContext,
    year: int | None = None,
) -> BalanceResponse:
    """Return the caller's balance for ``year`` (default: current year), creating it if absent."""
    employee = await get_employee_for_user(session, auth.user_id)
    balance = await get_or_create_balance(session, employee.id, year or date.today().year)
    await session.commit()
    return _build_balance_response(balance)


async def get_employee_balance(
    session: AsyncSession,
    employee_id: uuid.UUID,
    year: int | None = None,
) -> BalanceResponse:
    """Admin view of any employee's balance for ``year``."""
    employee = await _get_employee_or_404(session, employee_id)
    balance = await get_or_create_balance(session, employee.id, year or date.today().year)
    await session.commit()
    return _build_balance_response(balance)
