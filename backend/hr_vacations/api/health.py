import logging
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from hr_vacations.config import get_settings
from hr_vacations.db import SessionDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Service liveness plus the state of the vacation store."""

    status: Literal["ok", "degraded"]
    service: str
    version: str
    environment: str
    database: Literal["reachable", "unreachable"]
    balance_enforced_on_approval: bool


@router.get("/health", response_model=HealthResponse)
async def health(session: SessionDep) -> HealthResponse:
    """Report whether the vacation store answers and how approvals are checked."""
    settings = get_settings()
    database: Literal["reachable", "unreachable"] = "reachable"

    try:
        await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError):
        logger.exception("Health check: vacation store unreachable")
        database = "unreachable"

    return HealthResponse(
        status="ok" if database == "reachable" else "degraded",
        service=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        database=database,
        balance_enforced_on_approval=settings.enforce_balance_on_approval,
    )
