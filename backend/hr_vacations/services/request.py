# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col

from hr_vacations.config import get_settings
from hr_vacations.exceptions import (
    AppError,
    AuthorizationError,
    ConflictError,
    InsufficientBalanceError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from hr_vacations.models.enums import DECISION_STATUSES, AuditAction, AuditEntityType, RequestStatus
from hr_vacations.models.request import VacationRequest
from hr_vacations.schemas.request import DecisionResponse, RequestResponse, SubmitRequestResponse
from hr_vacations.services.audit import model_to_audit_dict, write_audit_log
from hr_vacations.services.balance import get_or_create_balance, settle_approval
from hr_vacations.services.employee import get_employee_for_user

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from hr_vacations.schemas.auth import AuthContext
    from hr_vacations.schemas.request import DecisionPayload, SubmitRequestPayload

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _current_year() -> int:
    return date.today().year


def calculate_days_requested(start_date: date, end_date: date) -> int:
    """Inclusive calendar-day count. Zero or negative when end precedes start."""
    return (end_date - start_date).days + 1


def _build_request_response(request: VacationRequest) -> RequestResponse:
    """Map a request model to its response schema."""
    return RequestResponse(
        id=request.id,
        employee_id=request.employee_id,
        start_date=request.start_date,
        end_date=request.end_date,
        days_requested=request.days_requested,
        type=request.type,
        reason=request.reason,
        status=RequestStatus(request.status),
        approved_by=request.approved_by,
        approved_at=request.approved_at,
        notes=request.notes,
        created_at=request.created_at,
        updated_at=request.updated_at,
    )


async def _get_request_or_404(
    session: AsyncSession,
    request_id: uuid.UUID,
    for_update: bool = False,
) -> VacationRequest:
    """Fetch a request by ID. Raises 404 if not found."""
    query = select(VacationRequest).where(col(VacationRequest.id) == request_id)
    if for_update:
        query = query.with_for_update()
    result = await session.execute(query)
    request = result.scalar_one_or_none()
    if request is None:
        raise NotFoundError("Vacation request not found")
    return request


def _apply_decision(
    request: VacationRequest,
    status: RequestStatus,
    approver_id: uuid.UUID,
    notes: str | None,
    decided_at: datetime,
) -> None:
    """Move a pending request to its terminal status. Decisions are set exactly once."""
    if request.status != RequestStatus.PENDING.value:
        raise ConflictError(f"Vacation request has already been {request.status}")
    request.status = status.value
    request.approved_by = approver_id
    request.approved_at = decided_at
    request.notes = notes


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def submit_request(
    session: AsyncSession,
    auth: AuthContext,
    payload: SubmitRequestPayload,
) -> SubmitRequestResponse:
    """Create a pending vacation request for the caller.

    Flow:
    1. Require both dates
    2. Resolve the caller's employee record
    3. Get or create the current-year balance
    4. Compute the inclusive day count, reject if not positive
    5. Reject if it exceeds the remaining days
    6. Persist the request (pending), audit, commit

    The balance is only read here. Nothing is reserved, so two pending requests
    may together exceed the remaining days; decide_request re-checks on approval.
    """
    if payload.start_date is None or payload.end_date is None:
        raise ValidationError("Start date and end date are required")

    employee = await get_employee_for_user(session, auth.user_id)
    balance = await get_or_create_balance(session, employee.id, _current_year())

    days_requested = calculate_days_requested(payload.start_date, payload.end_date)
    if days_requested <= 0:
        raise ValidationError("Invalid date range")

    if days_requested > balance.remaining_days:
        raise InsufficientBalanceError(balance.remaining_days)

    vacation_request = VacationRequest(
        employee_id=employee.id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        days_requested=days_requested,
        type=payload.type,
        reason=payload.reason,
        status=RequestStatus.PENDING.value,
    )
    session.add(vacation_request)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.REQUEST,
        entity_id=vacation_request.id,
        action=AuditAction.SUBMIT,
        after_json=model_to_audit_dict(vacation_request),
    )

    await session.commit()
    return SubmitRequestResponse(request_id=vacation_request.id)


async def decide_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    payload: DecisionPayload,
) -> DecisionResponse:
    """Approve or deny a pending request (admin only).

    Approval settles the balance in the same transaction as the status change:
    1. Lock the request row, require status pending
    2. Resolve the approver's employee record
    3. On approve: lock the current-year balance, optionally re-check the
       remaining days, then consume them
    4. Record approver, timestamp and notes; audit
    5. Commit once

    Any failure rolls the whole transaction back.
    """
    if not auth.is_admin:
        raise AuthorizationError()
    if payload.status not in DECISION_STATUSES:
        raise ValidationError("Status must be approved or denied")
    new_status = RequestStatus(payload.status)

    try:
        vacation_request = await _get_request_or_404(session, request_id, for_update=True)
        approver = await get_employee_for_user(session, auth.user_id)

        before_dict = model_to_audit_dict(vacation_request)
        _apply_decision(vacation_request, new_status, approver.id, payload.notes, datetime.now(UTC))

        if new_status == RequestStatus.APPROVED:
            balance = await get_or_create_balance(
                session, vacation_request.employee_id, _current_year(), for_update=True
            )
            if (
                get_settings().enforce_balance_on_approval
                and vacation_request.days_requested > balance.remaining_days
            ):
                raise InsufficientBalanceError(balance.remaining_days, status_code=409)
            settle_approval(balance, vacation_request.days_requested)

        await session.flush()

        await write_audit_log(
            session,
            actor_id=auth.user_id,
            entity_type=AuditEntityType.REQUEST,
            entity_id=vacation_request.id,
            action=AuditAction.APPROVE if new_status == RequestStatus.APPROVED else AuditAction.DENY,
            before_json=before_dict,
            after_json=model_to_audit_dict(vacation_request),
        )

        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("Decision on vacation request %s failed, rolled back", request_id)
        raise StorageError() from exc
    except AppError:
        await session.rollback()
        raise

    logger.info("Vacation request %s %s by %s", request_id, new_status.value, auth.user_id)
    await session.refresh(vacation_request)
    return DecisionResponse(
        message=f"Vacation request {new_status.value} successfully",
        request=_build_request_response(vacation_request),
    )


async def get_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
) -> RequestResponse:
    """Get a single request. Employees may only read their own."""
    vacation_request = await _get_request_or_404(session, request_id)
    if not auth.is_admin:
        employee = await get_employee_for_user(session, auth.user_id)
        if vacation_request.employee_id != employee.id:
            raise AuthorizationError("Not authorized to view this request")
    return _build_request_response(vacation_request)
