"""
Module: asset_kernel.selectors.assignment_selector
Responsibility: Scoped reads over the assignment ledger.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - ``is_overdue`` is computed from the injected clock at read time; the
      stored row is never changed by a read.
    - Team-scoped principals only see entries of employees in their team.
"""

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from asset_kernel.domain.access import AccessScope
from asset_kernel.domain.dtos import AssignmentInfo
from asset_kernel.domain.lifecycle import AssignmentType
from asset_kernel.exceptions import AssignmentNotFoundError
from asset_kernel.models.assignment import AssetAssignment
from asset_kernel.selectors.base import BaseSelector
from asset_kernel.selectors.mapping import assignment_to_info


def count_active_assignments(session: Session, asset_id: UUID) -> int:
    """Number of active ledger entries on one asset."""
    stmt = select(func.count(AssetAssignment.id)).where(
        AssetAssignment.asset_id == asset_id,
        AssetAssignment.is_active == True,  # noqa: E712
    )
    return session.execute(stmt).scalar_one()


def active_counts_by_asset(session: Session, asset_ids: Iterable[UUID]) -> dict[UUID, int]:
    ids = list(asset_ids)
    if not ids:
        return {}
    stmt = (
        select(AssetAssignment.asset_id, func.count(AssetAssignment.id))
        .where(
            AssetAssignment.asset_id.in_(ids),
            AssetAssignment.is_active == True,  # noqa: E712
        )
        .group_by(AssetAssignment.asset_id)
    )
    return {asset_id: count for asset_id, count in session.execute(stmt).all()}


class AssignmentSelector(BaseSelector[AssetAssignment]):
    """Read-only queries over ledger entries."""

    def get_assignment(self, scope: AccessScope, assignment_id: UUID) -> AssignmentInfo:
        """
        Raises:
            AssignmentNotFoundError: If the entry doesn't exist.
            OutOfScopeError: If the entry's employee is outside the scope.
        """
        entry = self.session.get(AssetAssignment, assignment_id)
        if entry is None:
            raise AssignmentNotFoundError(str(assignment_id))
        scope.require_visible(entry.employee_id)
        return assignment_to_info(entry, self.clock.today())

    def list_assignments(
        self,
        scope: AccessScope,
        *,
        active_only: bool = False,
        asset_id: UUID | None = None,
        employee_id: UUID | None = None,
        overdue_only: bool = False,
    ) -> list[AssignmentInfo]:
        """Ledger entries visible to ``scope``, newest first."""
        stmt = select(AssetAssignment)
        if scope.team_filter is not None:
            stmt = stmt.where(AssetAssignment.employee_id.in_(sorted(scope.team_filter)))
        if active_only or overdue_only:
            stmt = stmt.where(AssetAssignment.is_active == True)  # noqa: E712
        if overdue_only:
            stmt = stmt.where(
                AssetAssignment.assignment_type == AssignmentType.TEMPORARY.value,
                AssetAssignment.expiry_date < self.clock.today(),
            )
        if asset_id is not None:
            stmt = stmt.where(AssetAssignment.asset_id == asset_id)
        if employee_id is not None:
            stmt = stmt.where(AssetAssignment.employee_id == employee_id)
        stmt = stmt.order_by(
            AssetAssignment.assigned_at.desc(),
            AssetAssignment.employee_name,
        )

        today = self.clock.today()
        entries = self.session.execute(stmt).unique().scalars().all()
        return [assignment_to_info(e, today) for e in entries]

    def list_employee_assets(self, scope: AccessScope, employee_id: UUID) -> list[AssignmentInfo]:
        """Assets an employee currently holds."""
        scope.require_visible(employee_id)
        return self.list_assignments(scope, active_only=True, employee_id=employee_id)
