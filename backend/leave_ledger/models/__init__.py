from sqlmodel import SQLModel

from leave_ledger.models.accrual import AccrualCredit, EmploymentTermRate
from leave_ledger.models.adjustment import LeaveBalanceAdjustment
from leave_ledger.models.application import LeaveApplication, SandwichBridge
from leave_ledger.models.audit import AuditLog
from leave_ledger.models.balance import LeaveBalance
from leave_ledger.models.base import TimestampMixin, UpdatedAtMixin, UUIDBase
from leave_ledger.models.enums import (
    AdjustmentType,
    AuditAction,
    AuditEntityType,
    EmployeeStatus,
    EmploymentTerm,
    HalfDayPeriod,
    LeaveStatus,
    NotificationEvent,
    RateSource,
    Role,
)
from leave_ledger.models.holiday import Holiday
from leave_ledger.models.leave_type import LeaveType

__all__ = [
    "AccrualCredit",
    "AdjustmentType",
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "EmployeeStatus",
    "EmploymentTerm",
    "EmploymentTermRate",
    "HalfDayPeriod",
    "Holiday",
    "LeaveApplication",
    "LeaveBalance",
    "LeaveBalanceAdjustment",
    "LeaveStatus",
    "LeaveType",
    "NotificationEvent",
    "RateSource",
    "Role",
    "SQLModel",
    "SandwichBridge",
    "TimestampMixin",
    "UUIDBase",
    "UpdatedAtMixin",
]
