"""
Module: asset_kernel.selectors.history_selector
Responsibility: Per-employee rollups over the assignment log.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Nothing is cached: every call recomputes from the log and the live
      ledger.
    - ``total_count`` counts log entries, ``assignment_count`` distinct
      assignments, ``active_count`` live active entries.
    - Rollups are sorted by display name, case-insensitively.
    - An employee is at risk when the directory marks them inactive (or no
      longer knows them) while they still hold assets.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from asset_kernel.domain.access import AccessScope
from asset_kernel.domain.clock import Clock
from asset_kernel.domain.directory import EmployeeDirectory
from asset_kernel.domain.dtos import AssignmentLogInfo, EmployeeHistoryRollup
from asset_kernel.models.assignment import AssetAssignment, AssignmentLogEntry
from asset_kernel.selectors.base import BaseSelector
from asset_kernel.selectors.mapping import log_to_info


class HistorySelector(BaseSelector[AssignmentLogEntry]):
    """Read-side aggregation of assignment history, grouped by employee."""

    def __init__(
        self,
        session: Session,
        directory: EmployeeDirectory,
        clock: Clock | None = None,
    ):
        super().__init__(session, clock)
        self.directory = directory

    def _scoped(self, stmt, column, scope: AccessScope):
        if scope.team_filter is None:
            return stmt
        return stmt.where(column.in_(sorted(scope.team_filter)))

    def employee_rollups(self, scope: AccessScope) -> list[EmployeeHistoryRollup]:
        log_stmt = self._scoped(
            select(
                AssignmentLogEntry.employee_id,
                func.count(AssignmentLogEntry.id),
                func.count(AssignmentLogEntry.assignment_id.distinct()),
                func.max(AssignmentLogEntry.action_date),
            ).group_by(AssignmentLogEntry.employee_id),
            AssignmentLogEntry.employee_id,
            scope,
        )
        totals = {
            employee_id: (total, distinct, last)
            for employee_id, total, distinct, last in self.session.execute(log_stmt).all()
        }
        if not totals:
            return []

        active_stmt = self._scoped(
            select(AssetAssignment.employee_id, func.count(AssetAssignment.id))
            .where(AssetAssignment.is_active == True)  # noqa: E712
            .group_by(AssetAssignment.employee_id),
            AssetAssignment.employee_id,
            scope,
        )
        active = dict(self.session.execute(active_stmt).all())

        # Latest snapshot per employee, for people the directory has dropped.
        snapshot_stmt = self._scoped(
            select(
                AssignmentLogEntry.employee_id,
                AssignmentLogEntry.employee_name,
                AssignmentLogEntry.employee_code,
                AssignmentLogEntry.employee_department,
            ).order_by(AssignmentLogEntry.seq),
            AssignmentLogEntry.employee_id,
            scope,
        )
        snapshots = {row[0]: row[1:] for row in self.session.execute(snapshot_stmt).all()}

        rollups = []
        for employee_id, (total, distinct, last) in totals.items():
            record = self.directory.get(employee_id)
            if record is not None:
                name, code, department = record.name, record.employee_code, record.department
            else:
                name, code, department = snapshots[employee_id]
            rollups.append(
                EmployeeHistoryRollup(
                    employee_id=employee_id,
                    employee_name=name,
                    employee_code=code,
                    department=department,
                    total_count=total,
                    assignment_count=distinct,
                    active_count=active.get(employee_id, 0),
                    last_action_date=last,
                    is_employee_active=record is not None and record.is_active,
                )
            )

        rollups.sort(key=lambda r: (r.employee_name.casefold(), str(r.employee_id)))
        return rollups

    def at_risk(self, scope: AccessScope) -> list[EmployeeHistoryRollup]:
        """Inactive employees who still hold assets."""
        return [r for r in self.employee_rollups(scope) if r.risk]

    def employee_history(self, scope: AccessScope, employee_id: UUID) -> list[AssignmentLogInfo]:
        """One employee's log entries, newest first."""
        scope.require_visible(employee_id)
        stmt = (
            select(AssignmentLogEntry)
            .where(AssignmentLogEntry.employee_id == employee_id)
            .order_by(AssignmentLogEntry.seq.desc())
        )
        return [log_to_info(log) for log in self.session.execute(stmt).scalars().all()]
