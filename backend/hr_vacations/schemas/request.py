# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from hr_vacations.models.enums import RequestStatus

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class SubmitRequestPayload(BaseModel):
    """Request body for submitting a vacation request.

    Dates are optional at the schema level so that a missing date yields the
    same 400 response as an invalid range instead of a 422.
    """

    start_date: date | None = None
    end_date: date | None = None
    type: str = Field(default="vacation", min_length=1, max_length=50)
    reason: str | None = Field(default=None, max_length=2000)


class DecisionPayload(BaseModel):
    """Request body for PUT /vacations/{id}/status.

    ``status`` is checked by the service so that a missing or unknown value
    gets the same 400 response.
    """

    status: str | None = None
    notes: str | None = Field(default=None, max_length=2000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class SubmitRequestResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = "Vacation request submitted successfully"
    request_id: uuid.UUID = Field(alias="requestId")


class RequestResponse(BaseModel):
    """Response schema for a single vacation request."""

    id: uuid.UUID
    employee_id: uuid.UUID
    start_date: date
    end_date: date
    days_requested: int
    type: str
    reason: str | None
    status: RequestStatus
    approved_by: uuid.UUID | None
    approved_at: datetime | None
    notes: str | None
    created_at: datetime
    updated_at: datetime


class DecisionResponse(BaseModel):
    message: str
    request: RequestResponse


class RequestDetailResponse(RequestResponse):
    """A request joined with requester and approver display names."""

    first_name: str
    last_name: str
    department: str | None
    approved_by_first_name: str | None
    approved_by_last_name: str | None


class RequestListResponse(BaseModel):
    """Paginated list of vacation requests."""

    items: list[RequestDetailResponse]
    total: int

