from __future__ import annotations

import enum


class Role(enum.StrEnum):
    """Role carried by the authenticated caller."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class EmployeeStatus(enum.StrEnum):
    """Employment status. Inactive employees keep their history."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class RequestStatus(enum.StrEnum):
    """State machine for vacation requests: pending -> approved | denied."""

    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    EMPLOYEE = "EMPLOYEE"
    REQUEST = "REQUEST"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DEACTIVATE = "DEACTIVATE"
    SUBMIT = "SUBMIT"
    APPROVE = "APPROVE"
    DENY = "DENY"


DECISION_STATUSES = frozenset({RequestStatus.APPROVED, RequestStatus.DENIED})
