# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from hr_vacations.api.deps import AdminDep, AuthDep
from hr_vacations.db import SessionDep
from hr_vacations.models.enums import RequestStatus
from hr_vacations.schemas.balance import BalanceResponse
from hr_vacations.schemas.report import RequestStatsResponse
from hr_vacations.schemas.request import (
    DecisionPayload,
    DecisionResponse,
    RequestListResponse,
    RequestResponse,
    SubmitRequestPayload,
    SubmitRequestResponse,
)
from hr_vacations.services import balance as balance_service
from hr_vacations.services import report as report_service
from hr_vacations.services import request as request_service

vacations_router = APIRouter(prefix="/vacations", tags=["vacations"])


@vacations_router.get("", response_model=RequestListResponse)
async def list_requests(
    session: SessionDep,
    auth: AuthDep,
    status_filter: RequestStatus | None = Query(default=None, alias="status"),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=200),
) -> RequestListResponse:
    """List vacation requests: all for admins, the caller's own otherwise."""
    return await report_service.list_requests(session, auth, status_filter, offset, limit)


@vacations_router.post("", response_model=SubmitRequestResponse, status_code=status.HTTP_201_CREATED)
async def submit_request(
    payload: SubmitRequestPayload,
    session: SessionDep,
    auth: AuthDep,
) -> SubmitRequestResponse:
    """Submit a vacation request for the caller."""
    return await request_service.submit_request(session, auth, payload)


@vacations_router.get("/balance", response_model=BalanceResponse)
async def get_balance(
    session: SessionDep,
    auth: AuthDep,
    year: int | None = Query(default=None, ge=1970, le=9999),
) -> BalanceResponse:
    """Get the caller's vacation balance, creating the year's row if needed."""
    return await balance_service.get_current_balance(session, auth, year)


@vacations_router.get("/stats", response_model=RequestStatsResponse)
async def get_stats(
    session: SessionDep,
    auth: AdminDep,
) -> RequestStatsResponse:
    """Request counts by status and total approved days (admin only)."""
    return await report_service.get_request_stats(session, auth)


@vacations_router.get("/{request_id}", response_model=RequestResponse)
async def get_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> RequestResponse:
    """Get a single vacation request."""
    return await request_service.get_request(session, auth, request_id)


@vacations_router.put("/{request_id}/status", response_model=DecisionResponse)
async def decide_request(
    request_id: uuid.UUID,
    payload: DecisionPayload,
    session: SessionDep,
    auth: AdminDep,
) -> DecisionResponse:
    """Approve or deny a pending request (admin only)."""
    return await request_service.decide_request(session, auth, request_id, payload)
