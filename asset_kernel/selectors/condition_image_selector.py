"""
Module: asset_kernel.selectors.condition_image_selector
Responsibility: Scoped reads over quarterly condition images, and the list
    of issued hardware still waiting for this quarter's photos.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - The current quarter comes from the injected clock.
    - Only active entries on assets currently ``assigned`` are due, and only
      for hardware categories (see domain/condition_images.py).
    - Team-scoped principals only see entries of employees in their team.
"""

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from asset_kernel.domain.access import AccessScope
from asset_kernel.domain.clock import Clock
from asset_kernel.domain.condition_images import MAX_IMAGES_PER_QUARTER, Quarter, is_hardware_category
from asset_kernel.domain.dtos import ConditionImageInfo, ConditionImagesDue
from asset_kernel.domain.lifecycle import AssetStatus
from asset_kernel.exceptions import AssignmentNotFoundError
from asset_kernel.models.asset import Asset
from asset_kernel.models.assignment import AssetAssignment
from asset_kernel.models.condition_image import AssetConditionImage
from asset_kernel.selectors.base import BaseSelector
from asset_kernel.selectors.mapping import condition_image_to_info


def count_condition_images(session: Session, assignment_id: UUID, period: Quarter) -> int:
    """Images recorded on one entry in one quarter."""
    stmt = select(func.count(AssetConditionImage.id)).where(
        AssetConditionImage.assignment_id == assignment_id,
        AssetConditionImage.upload_year == period.year,
        AssetConditionImage.upload_quarter == period.quarter,
    )
    return session.execute(stmt).scalar_one()


def image_counts_by_assignment(
    session: Session, assignment_ids: Iterable[UUID], period: Quarter
) -> dict[UUID, int]:
    ids = list(assignment_ids)
    if not ids:
        return {}
    stmt = (
        select(AssetConditionImage.assignment_id, func.count(AssetConditionImage.id))
        .where(
            AssetConditionImage.assignment_id.in_(ids),
            AssetConditionImage.upload_year == period.year,
            AssetConditionImage.upload_quarter == period.quarter,
        )
        .group_by(AssetConditionImage.assignment_id)
    )
    return {assignment_id: count for assignment_id, count in session.execute(stmt).all()}


class ConditionImageSelector(BaseSelector[AssetConditionImage]):
    """
    Read-only queries over condition images.

    Args:
        max_images_per_quarter: Reported as ``max_images_allowed``; pass the
            same cap the ledger enforces.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        max_images_per_quarter: int = MAX_IMAGES_PER_QUARTER,
    ):
        super().__init__(session, clock)
        self.max_images_per_quarter = max_images_per_quarter

    def current_quarter(self) -> Quarter:
        return Quarter.of(self.clock.today())

    def list_condition_images(
        self, scope: AccessScope, assignment_id: UUID
    ) -> list[ConditionImageInfo]:
        """
        Every image recorded on one entry, newest first.

        Raises:
            AssignmentNotFoundError: If the entry doesn't exist.
            OutOfScopeError: If the entry's employee is outside the scope.
        """
        entry = self.session.get(AssetAssignment, assignment_id)
        if entry is None:
            raise AssignmentNotFoundError(str(assignment_id))
        scope.require_visible(entry.employee_id)

        stmt = (
            select(AssetConditionImage)
            .where(AssetConditionImage.assignment_id == assignment_id)
            .order_by(AssetConditionImage.uploaded_at.desc(), AssetConditionImage.image_filename)
        )
        return [condition_image_to_info(i) for i in self.session.execute(stmt).scalars()]

    def images_due(
        self,
        scope: AccessScope,
        *,
        employee_id: UUID | None = None,
        missing_only: bool = True,
    ) -> list[ConditionImagesDue]:
        """
        Active hardware entries and their image count for the current quarter.

        With ``missing_only`` (the default) only entries without a single
        image this quarter are returned.  Sorted by employee name, then tag.
        """
        if employee_id is not None:
            scope.require_visible(employee_id)
        period = self.current_quarter()

        stmt = (
            select(AssetAssignment)
            .join(Asset, AssetAssignment.asset_id == Asset.id)
            .where(
                AssetAssignment.is_active == True,  # noqa: E712
                Asset.status == AssetStatus.ASSIGNED.value,
            )
        )
        if scope.team_filter is not None:
            stmt = stmt.where(AssetAssignment.employee_id.in_(sorted(scope.team_filter)))
        if employee_id is not None:
            stmt = stmt.where(AssetAssignment.employee_id == employee_id)

        entries = [
            e
            for e in self.session.execute(stmt).unique().scalars().all()
            if is_hardware_category(e.asset.category.name, e.asset.category.kind)
        ]
        counts = image_counts_by_assignment(self.session, (e.id for e in entries), period)

        due = [
            ConditionImagesDue(
                assignment_id=e.id,
                asset_id=e.asset_id,
                asset_name=e.asset.name,
                asset_tag=e.asset.asset_tag,
                employee_id=e.employee_id,
                employee_name=e.employee_name,
                upload_year=period.year,
                upload_quarter=period.quarter,
                images_uploaded=counts.get(e.id, 0),
                max_images_allowed=self.max_images_per_quarter,
            )
            for e in entries
        ]
        if missing_only:
            due = [d for d in due if d.images_uploaded == 0]
        return sorted(due, key=lambda d: (d.employee_name.casefold(), d.asset_tag))
