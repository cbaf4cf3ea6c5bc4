# ruff: noqa: TC003
"""Identity/Org collaborator.

The ledger never stores employee records. Join date, status and reporting
line are read through ``EmployeeService``; the in-memory implementation
backs local runs and tests.
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import Protocol, runtime_checkable

from pydantic import BaseModel

from leave_ledger.models.enums import EmployeeStatus, EmploymentTerm


class EmployeeInfo(BaseModel):
    id: uuid.UUID
    full_name: str
    email: str
    join_date: date | None = None
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    manager_id: uuid.UUID | None = None
    employment_term: EmploymentTerm | None = None

    @property
    def is_active(self) -> bool:
        return self.status == EmployeeStatus.ACTIVE

    def is_managed_by(self, user_id: uuid.UUID) -> bool:
        return self.manager_id is not None and self.manager_id == user_id


@runtime_checkable
class EmployeeService(Protocol):
    async def get_employee(self, employee_id: uuid.UUID) -> EmployeeInfo | None: ...

    async def list_employees(self) -> list[EmployeeInfo]: ...


class InMemoryEmployeeService:
    """Dict-backed directory. ``seed`` inserts or replaces a record."""

    def __init__(self, employees: list[EmployeeInfo] | None = None) -> None:
        self._by_id: dict[uuid.UUID, EmployeeInfo] = {e.id: e for e in employees or []}

    def seed(self, employee: EmployeeInfo) -> None:
        self._by_id[employee.id] = employee

    async def get_employee(self, employee_id: uuid.UUID) -> EmployeeInfo | None:
        return self._by_id.get(employee_id)

    async def list_employees(self) -> list[EmployeeInfo]:
        return list(self._by_id.values())


_employee_service: EmployeeService = InMemoryEmployeeService()


def get_employee_service() -> EmployeeService:
    return _employee_service


def set_employee_service(service: EmployeeService) -> None:
    """Swap the directory implementation (tests, production wiring)."""
    global _employee_service
    _employee_service = service
