from __future__ import annotations

import enum


class LeaveStatus(enum.StrEnum):
    """State machine for leave applications."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"
    CANCELLED = "cancelled"


class HalfDayPeriod(enum.StrEnum):
    """Which half of the day a half-day leave covers."""

    FIRST_HALF = "first_half"
    SECOND_HALF = "second_half"


class AdjustmentType(enum.StrEnum):
    """Direction of a manual HR balance adjustment."""

    ADD = "add"
    SUBTRACT = "subtract"


class EmploymentTerm(enum.StrEnum):
    """Employment term reported by the identity service."""

    FULL_TIME = "full_time"
    PART_TIME = "part_time"
    ASSOCIATE = "associate"
    CONTRACT = "contract"
    PROBATION = "probation"


class RateSource(enum.StrEnum):
    """Where a monthly accrual rate came from."""

    TENURE = "tenure"
    EMPLOYMENT_TERM = "employment_term"


class EmployeeStatus(enum.StrEnum):
    """Employment status reported by the identity service."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class Role(enum.StrEnum):
    """Actor role carried in the auth context."""

    ADMIN = "admin"
    HR = "hr"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class NotificationEvent(enum.StrEnum):
    """Events handed to the notification collaborator."""

    LEAVE_SUBMITTED = "leave_submitted"
    LEAVE_APPROVED = "leave_approved"
    LEAVE_REJECTED = "leave_rejected"
    LEAVE_WITHDRAWN = "leave_withdrawn"
    LEAVE_CANCELLED = "leave_cancelled"
    BALANCE_ADJUSTED = "balance_adjusted"
    LEAVE_CREDITED = "leave_credited"
    ANNIVERSARY_PROCESSED = "anniversary_processed"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    APPLICATION = "APPLICATION"
    HOLIDAY = "HOLIDAY"
    LEAVE_TYPE = "LEAVE_TYPE"
    EMPLOYMENT_TERM_RATE = "EMPLOYMENT_TERM_RATE"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    SUBMIT = "SUBMIT"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    WITHDRAW = "WITHDRAW"
    CANCEL = "CANCEL"
    RELEASE_BRIDGE = "RELEASE_BRIDGE"
