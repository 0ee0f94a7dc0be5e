from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RequestStatsResponse(BaseModel):
    """Request counts by status and approved day total."""

    model_config = ConfigDict(populate_by_name=True)

    pending: int
    approved: int
    denied: int
    total_days_requested: int = Field(alias="totalDaysRequested")
