"""Tests for the vacation request lifecycle: submit, approve, deny, re-decision,
balance settlement, the submit/approve race, and transactional rollback.
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING, Any

import pytest
from conftest import ADMIN_AUTH, ADMIN_HEADERS, EMPLOYEE_AUTH, EMPLOYEE_HEADERS, OTHER_HEADERS
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlmodel import col

from hr_vacations.config import get_settings
from hr_vacations.exceptions import AuthorizationError, StorageError
from hr_vacations.models.audit import AuditLog
from hr_vacations.models.balance import VacationBalance
from hr_vacations.models.request import VacationRequest
from hr_vacations.schemas.request import DecisionPayload
from hr_vacations.services import request as request_service
from hr_vacations.services.balance import get_or_create_balance
from hr_vacations.services.request import calculate_days_requested

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

REQUESTS_URL = "/vacations"
YEAR = date.today().year


# ---------------------------------------------------------------------------
# Test helpers
# ---------------------------------------------------------------------------


def _payload(start: str = "2030-07-01", end: str = "2030-07-05", **extra: Any) -> dict[str, Any]:
    return {"start_date": start, "end_date": end, **extra}


async def _submit(
    client: AsyncClient,
    start: str = "2030-07-01",
    end: str = "2030-07-05",
    headers: dict[str, str] | None = None,
) -> str:
    """Submit a request and return its id. Asserts 201."""
    resp = await client.post(REQUESTS_URL, json=_payload(start, end), headers=headers or EMPLOYEE_HEADERS)
    assert resp.status_code == 201, resp.json()
    request_id: str = resp.json()["requestId"]
    return request_id


async def _decide(client: AsyncClient, request_id: str, status: str, notes: str | None = None) -> Any:
    body: dict[str, Any] = {"status": status}
    if notes is not None:
        body["notes"] = notes
    return await client.put(f"{REQUESTS_URL}/{request_id}/status", json=body, headers=ADMIN_HEADERS)


async def _balance(session: AsyncSession, employee_id: uuid.UUID) -> tuple[int, int, int]:
    result = await session.execute(
        select(VacationBalance).where(
            col(VacationBalance.employee_id) == employee_id,
            col(VacationBalance.year) == YEAR,
        )
    )
    balance = result.scalar_one()
    await session.refresh(balance)
    return balance.total_days, balance.used_days, balance.remaining_days


async def _set_used(session: AsyncSession, employee_id: uuid.UUID, used: int) -> None:
    balance = await get_or_create_balance(session, employee_id, YEAR)
    balance.used_days = used
    balance.remaining_days = balance.total_days - used
    await session.commit()


async def _request_count(session: AsyncSession) -> int:
    result = await session.execute(select(func.count()).select_from(VacationRequest))
    return result.scalar_one()


async def _get_request(session: AsyncSession, request_id: str) -> VacationRequest:
    request = await session.get(VacationRequest, uuid.UUID(request_id))
    assert request is not None
    await session.refresh(request)
    return request


# ---------------------------------------------------------------------------
# Day counting
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("start", "end", "expected"),
    [
        (date(2030, 7, 1), date(2030, 7, 1), 1),
        (date(2030, 7, 1), date(2030, 7, 5), 5),
        (date(2030, 12, 30), date(2031, 1, 2), 4),
        (date(2030, 7, 5), date(2030, 7, 4), 0),
        (date(2030, 7, 5), date(2030, 7, 1), -3),
    ],
)
def test_calculate_days_requested(start: date, end: date, expected: int) -> None:
    assert calculate_days_requested(start, end) == expected


# ---------------------------------------------------------------------------
# Submit
# ---------------------------------------------------------------------------


async def test_submit_request_success(
    async_client: AsyncClient, db_session: AsyncSession, employee_id: uuid.UUID
) -> None:
    """A 5-day request is created pending and leaves the balance untouched."""
    resp = await async_client.post(
        REQUESTS_URL,
        json=_payload(type="vacation", reason="Beach"),
        headers=EMPLOYEE_HEADERS,
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["message"] == "Vacation request submitted successfully"

    request = await _get_request(db_session, data["requestId"])
    assert request.status == "pending"
    assert request.days_requested == 5
    assert request.employee_id == employee_id
    assert request.reason == "Beach"
    assert request.approved_by is None
    assert request.approved_at is None
    assert request.notes is None

    assert await _balance(db_session, employee_id) == (25, 0, 25)


async def test_submit_defaults_type_to_vacation(
    async_client: AsyncClient, db_session: AsyncSession, employee_id: uuid.UUID
) -> None:
    request_id = await _submit(async_client, "2030-08-03", "2030-08-03")
    request = await _get_request(db_session, request_id)
    assert request.type == "vacation"
    assert request.days_requested == 1


async def test_submit_end_before_start_rejected(
    async_client: AsyncClient, db_session: AsyncSession, employee_id: uuid.UUID
) -> None:
    resp = await async_client.post(
        REQUESTS_URL, json=_payload("2030-07-05", "2030-07-01"), headers=EMPLOYEE_HEADERS
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "ValidationError"
    assert resp.json()["detail"] == "Invalid date range"
    assert await _request_count(db_session) == 0


@pytest.mark.parametrize("missing", ["start_date", "end_date"])
async def test_submit_missing_date_rejected(
    async_client: AsyncClient, db_session: AsyncSession, employee_id: uuid.UUID, missing: str
) -> None:
    body = _payload()
    del body[missing]
    resp = await async_client.post(REQUESTS_URL, json=body, headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Start date and end date are required"
    assert await _request_count(db_session) == 0


async def test_submit_insufficient_balance_rejected(
    async_client: AsyncClient, db_session: AsyncSession, employee_id: uuid.UUID
) -> None:
    """Balance (25, 24, 1) cannot cover a 3-day request."""
    await _set_used(db_session, employee_id, 24)

    resp = await async_client.post(
        REQUESTS_URL, json=_payload("2030-07-01", "2030-07-03"), headers=EMPLOYEE_HEADERS
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "InsufficientBalanceError"
    assert resp.json()["detail"] == "Insufficient vacation days. You have 1 days remaining."
    assert await _request_count(db_session) == 0
    assert await _balance(db_session, employee_id) == (25, 24, 1)


async def test_submit_exactly_remaining_allowed(
    async_client: AsyncClient, db_session: AsyncSession, employee_id: uuid.UUID
) -> None:
    await _set_used(db_session, employee_id, 22)
    await _submit(async_client, "2030-07-01", "2030-07-03")
    assert await _request_count(db_session) == 1


async def test_submit_without_employee_record_returns_404(async_client: AsyncClient) -> None:
    resp = await async_client.post(REQUESTS_URL, json=_payload(), headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Employee record not found"


async def test_submit_writes_audit_entry(
    async_client: AsyncClient, db_session: AsyncSession, employee_id: uuid.UUID
) -> None:
    request_id = await _submit(async_client)
    result = await db_session.execute(
        select(AuditLog).where(col(AuditLog.entity_id) == uuid.UUID(request_id))
    )
    entries = list(result.scalars().all())
    assert [e.action for e in entries] == ["SUBMIT"]
    assert entries[0].before_json is None
    assert entries[0].after_json is not None
    assert entries[0].after_json["status"] == "pending"


# ---------------------------------------------------------------------------
# Decisions
# ---------------------------------------------------------------------------


async def test_approve_settles_balance(
    async_client: AsyncClient,
    db_session: AsyncSession,
    employee_id: uuid.UUID,
    admin_employee_id: uuid.UUID,
) -> None:
    request_id = await _submit(async_client)

    resp = await _decide(async_client, request_id, "approved", notes="Enjoy")
    assert resp.status_code == 200
    data = resp.json()
    assert data["message"] == "Vacation request approved successfully"
    assert data["request"]["status"] == "approved"
    assert data["request"]["approved_by"] == str(admin_employee_id)
    assert data["request"]["approved_at"] is not None
    assert data["request"]["notes"] == "Enjoy"

    assert await _balance(db_session, employee_id) == (25, 5, 20)


async def test_deny_leaves_balance_unchanged(
    async_client: AsyncClient,
    db_session: AsyncSession,
    employee_id: uuid.UUID,
    admin_employee_id: uuid.UUID,
) -> None:
    request_id = await _submit(async_client)

    resp = await _decide(async_client, request_id, "denied", notes="Release week")
    assert resp.status_code == 200
    assert resp.json()["message"] == "Vacation request denied successfully"

    request = await _get_request(db_session, request_id)
    assert request.status == "denied"
    assert request.approved_by == admin_employee_id
    assert request.approved_at is not None
    assert request.notes == "Release week"
    assert await _balance(db_session, employee_id) == (25, 0, 25)


@pytest.mark.parametrize("first", ["approved", "denied"])
@pytest.mark.parametrize("second", ["approved", "denied"])
async def test_redecision_conflicts(
    async_client: AsyncClient,
    db_session: AsyncSession,
    employee_id: uuid.UUID,
    admin_employee_id: uuid.UUID,
    first: str,
    second: str,
) -> None:
    """Decisions are terminal; a second one never touches the balance again."""
    request_id = await _submit(async_client)
    assert (await _decide(async_client, request_id, first)).status_code == 200
    balance_after_first = await _balance(db_session, employee_id)

    resp = await _decide(async_client, request_id, second, notes="again")
    assert resp.status_code == 409
    assert resp.json()["error"] == "ConflictError"

    request = await _get_request(db_session, request_id)
    assert request.status == first
    assert request.notes is None
    assert await _balance(db_session, employee_id) == balance_after_first


@pytest.mark.parametrize("status", ["pending", "cancelled", "APPROVED", ""])
async def test_decision_with_invalid_status_rejected(
    async_client: AsyncClient, employee_id: uuid.UUID, admin_employee_id: uuid.UUID, status: str
) -> None:
    request_id = await _submit(async_client)
    resp = await _decide(async_client, request_id, status)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Status must be approved or denied"


async def test_decision_without_status_rejected(
    async_client: AsyncClient, db_session: AsyncSession, employee_id: uuid.UUID, admin_employee_id: uuid.UUID
) -> None:
    request_id = await _submit(async_client)
    resp = await async_client.put(f"{REQUESTS_URL}/{request_id}/status", json={"notes": "x"}, headers=ADMIN_HEADERS)

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Status must be approved or denied"
    assert (await _get_request(db_session, request_id)).status == "pending"


async def test_decision_requires_admin(
    async_client: AsyncClient, db_session: AsyncSession, employee_id: uuid.UUID
) -> None:
    request_id = await _submit(async_client)
    resp = await async_client.put(
        f"{REQUESTS_URL}/{request_id}/status", json={"status": "approved"}, headers=EMPLOYEE_HEADERS
    )
    assert resp.status_code == 403
    assert (await _get_request(db_session, request_id)).status == "pending"


async def test_decision_on_unknown_request_returns_404(
    async_client: AsyncClient, admin_employee_id: uuid.UUID
) -> None:
    resp = await _decide(async_client, str(uuid.uuid4()), "approved")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Vacation request not found"


async def test_decision_writes_audit_entry(
    async_client: AsyncClient,
    db_session: AsyncSession,
    employee_id: uuid.UUID,
    admin_employee_id: uuid.UUID,
) -> None:
    request_id = await _submit(async_client)
    await _decide(async_client, request_id, "approved")

    result = await db_session.execute(
        select(AuditLog)
        .where(col(AuditLog.entity_id) == uuid.UUID(request_id))
        .order_by(col(AuditLog.created_at))
    )
    entries = list(result.scalars().all())
    assert [e.action for e in entries] == ["SUBMIT", "APPROVE"]
    approve = entries[1]
    assert approve.before_json is not None
    assert approve.after_json is not None
    assert approve.before_json["status"] == "pending"
    assert approve.after_json["status"] == "approved"


# ---------------------------------------------------------------------------
# Submit-then-approve race
# ---------------------------------------------------------------------------


async def test_second_approval_exceeding_balance_is_rejected(
    async_client: AsyncClient,
    db_session: AsyncSession,
    employee_id: uuid.UUID,
    admin_employee_id: uuid.UUID,
) -> None:
    """Two pending 15-day requests both pass the submit check; only one can be settled."""
    first = await _submit(async_client, "2030-07-01", "2030-07-15")
    second = await _submit(async_client, "2030-08-01", "2030-08-15")

    assert (await _decide(async_client, first, "approved")).status_code == 200

    resp = await _decide(async_client, second, "approved")
    assert resp.status_code == 409
    assert resp.json()["error"] == "InsufficientBalanceError"
    assert resp.json()["detail"] == "Insufficient vacation days. You have 10 days remaining."

    assert (await _get_request(db_session, second)).status == "pending"
    assert await _balance(db_session, employee_id) == (25, 15, 10)

    # Denying the over-committed request still works.
    assert (await _decide(async_client, second, "denied")).status_code == 200


async def test_second_approval_goes_negative_when_enforcement_disabled(
    async_client: AsyncClient,
    db_session: AsyncSession,
    employee_id: uuid.UUID,
    admin_employee_id: uuid.UUID,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """With re-validation off, the unguarded check-then-act gap lets the balance go negative."""
    monkeypatch.setattr(get_settings(), "enforce_balance_on_approval", False)

    first = await _submit(async_client, "2030-07-01", "2030-07-15")
    second = await _submit(async_client, "2030-08-01", "2030-08-15")

    assert (await _decide(async_client, first, "approved")).status_code == 200
    assert (await _decide(async_client, second, "approved")).status_code == 200

    total, used, remaining = await _balance(db_session, employee_id)
    assert (total, used, remaining) == (25, 30, -5)
    assert remaining == total - used


# ---------------------------------------------------------------------------
# Transactional rollback
# ---------------------------------------------------------------------------


async def test_storage_failure_during_settlement_rolls_back(
    async_client: AsyncClient,
    db_session: AsyncSession,
    employee_id: uuid.UUID,
    admin_employee_id: uuid.UUID,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """A failure mid-approval leaves neither the status change nor the settlement behind."""
    request_id = await _submit(async_client)

    def _broken_settle(balance: VacationBalance, days: int) -> None:
        balance.used_days += days
        raise OperationalError("UPDATE vacation_balances", {}, Exception("disk I/O error"))

    monkeypatch.setattr(request_service, "settle_approval", _broken_settle)

    with pytest.raises(StorageError):
        await request_service.decide_request(
            db_session, ADMIN_AUTH, uuid.UUID(request_id), DecisionPayload(status="approved")
        )

    request = await _get_request(db_session, request_id)
    assert request.status == "pending"
    assert request.approved_by is None
    assert request.approved_at is None
    assert await _balance(db_session, employee_id) == (25, 0, 25)


async def test_storage_failure_surfaces_as_500(
    async_client: AsyncClient,
    employee_id: uuid.UUID,
    admin_employee_id: uuid.UUID,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    request_id = await _submit(async_client)

    def _broken_settle(balance: VacationBalance, days: int) -> None:
        raise OperationalError("UPDATE vacation_balances", {}, Exception("disk I/O error"))

    monkeypatch.setattr(request_service, "settle_approval", _broken_settle)

    resp = await _decide(async_client, request_id, "approved")
    assert resp.status_code == 500
    assert resp.json()["error"] == "StorageError"
    assert "disk" not in resp.json()["detail"]


async def test_decide_request_rejects_non_admin_identity(
    db_session: AsyncSession, employee_id: uuid.UUID
) -> None:
    """The service itself checks the passed identity, not only the router."""
    with pytest.raises(AuthorizationError):
        await request_service.decide_request(
            db_session, EMPLOYEE_AUTH, uuid.uuid4(), DecisionPayload(status="approved")
        )


# ---------------------------------------------------------------------------
# Single request read
# ---------------------------------------------------------------------------


async def test_get_request_owner_and_admin(
    async_client: AsyncClient,
    employee_id: uuid.UUID,
    other_employee_id: uuid.UUID,
    admin_employee_id: uuid.UUID,
) -> None:
    request_id = await _submit(async_client)

    own = await async_client.get(f"{REQUESTS_URL}/{request_id}", headers=EMPLOYEE_HEADERS)
    assert own.status_code == 200
    assert own.json()["days_requested"] == 5
    assert own.json()["status"] == "pending"

    admin = await async_client.get(f"{REQUESTS_URL}/{request_id}", headers=ADMIN_HEADERS)
    assert admin.status_code == 200

    other = await async_client.get(f"{REQUESTS_URL}/{request_id}", headers=OTHER_HEADERS)
    assert other.status_code == 403
