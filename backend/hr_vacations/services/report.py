"""Reporting service: role-scoped request listings and request statistics."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.orm import aliased
from sqlmodel import col

from hr_vacations.exceptions import AuthorizationError
from hr_vacations.models.employee import Employee
from hr_vacations.models.enums import RequestStatus
from hr_vacations.models.request import VacationRequest
from hr_vacations.schemas.report import RequestStatsResponse
from hr_vacations.schemas.request import RequestDetailResponse, RequestListResponse

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from hr_vacations.schemas.auth import AuthContext


async def list_requests(
    session: AsyncSession,
    auth: AuthContext,
    status_filter: RequestStatus | None = None,
    offset: int = 0,
    limit: int = 50,
) -> RequestListResponse:
    """List requests newest first. Admins see everyone's, employees only their own."""
    requester = aliased(Employee, name="requester")
    approver = aliased(Employee, name="approver")

    filters = []
    if not auth.is_admin:
        filters.append(requester.user_id == auth.user_id)
    if status_filter is not None:
        filters.append(col(VacationRequest.status) == status_filter.value)

    count_result = await session.execute(
        select(func.count())
        .select_from(VacationRequest)
        .join(requester, col(VacationRequest.employee_id) == requester.id)
        .where(*filters)
    )
    total = count_result.scalar_one()

    result = await session.execute(
        select(VacationRequest, requester, approver)
        .join(requester, col(VacationRequest.employee_id) == requester.id)
        .outerjoin(approver, col(VacationRequest.approved_by) == approver.id)
        .where(*filters)
        .order_by(col(VacationRequest.created_at).desc())
        .offset(offset)
        .limit(limit)
    )

    items = [
        RequestDetailResponse(
            id=r.id,
            employee_id=r.employee_id,
            start_date=r.start_date,
            end_date=r.end_date,
            days_requested=r.days_requested,
            type=r.type,
            reason=r.reason,
            status=RequestStatus(r.status),
            approved_by=r.approved_by,
            approved_at=r.approved_at,
            notes=r.notes,
            created_at=r.created_at,
            updated_at=r.updated_at,
            first_name=emp.first_name,
            last_name=emp.last_name,
            department=emp.department,
            approved_by_first_name=appr.first_name if appr else None,
            approved_by_last_name=appr.last_name if appr else None,
        )
        for r, emp, appr in result.all()
    ]
    return RequestListResponse(items=items, total=total)


async def get_request_stats(session: AsyncSession, auth: AuthContext) -> RequestStatsResponse:
    """Count requests per status and sum the days of approved ones (admin only)."""
    if not auth.is_admin:
        raise AuthorizationError()

    counts_result = await session.execute(
        select(col(VacationRequest.status), func.count()).group_by(col(VacationRequest.status))
    )
    counts = {status: count for status, count in counts_result.all()}

    days_result = await session.execute(
        select(func.coalesce(func.sum(col(VacationRequest.days_requested)), 0)).where(
            col(VacationRequest.status) == RequestStatus.APPROVED.value
        )
    )

    return RequestStatsResponse(
        pending=counts.get(RequestStatus.PENDING.value, 0),
        approved=counts.get(RequestStatus.APPROVED.value, 0),
        denied=counts.get(RequestStatus.DENIED.value, 0),
        total_days_requested=int(days_result.scalar_one()),
    )
