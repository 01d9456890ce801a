"""
Employee directory contract.

The kernel does not own employee records.  It reads them through
``EmployeeDirectory`` to validate assignees, resolve a manager's team,
snapshot display fields onto ledger entries, and flag inactive employees
who still hold assets.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID


@dataclass(frozen=True)
class EmployeeRecord:
    employee_id: UUID
    name: str
    employee_code: str | None = None
    department: str | None = None
    manager_id: UUID | None = None
    is_active: bool = True


class EmployeeDirectory(Protocol):
    """Read-only view of the HR employee directory."""

    def get(self, employee_id: UUID) -> EmployeeRecord | None:
        ...

    def direct_reports(self, manager_id: UUID) -> list[EmployeeRecord]:
        ...


class InMemoryEmployeeDirectory:
    """Dict-backed directory for tests, scripts and local use."""

    def __init__(self, records: list[EmployeeRecord] | None = None):
        self._records: dict[UUID, EmployeeRecord] = {}
        for record in records or []:
            self.add(record)

    def add(self, record: EmployeeRecord) -> EmployeeRecord:
        self._records[record.employee_id] = record
        return record

    def get(self, employee_id: UUID) -> EmployeeRecord | None:
        return self._records.get(employee_id)

    def direct_reports(self, manager_id: UUID) -> list[EmployeeRecord]:
        return [r for r in self._records.values() if r.manager_id == manager_id]

    def deactivate(self, employee_id: UUID) -> EmployeeRecord:
        """Mark an employee inactive (they left but may still hold assets)."""
        current = self._records[employee_id]
        updated = EmployeeRecord(
            employee_id=current.employee_id,
            name=current.name,
            employee_code=current.employee_code,
            department=current.department,
            manager_id=current.manager_id,
            is_active=False,
        )
        self._records[employee_id] = updated
        return updated
