"""
Module: asset_kernel.selectors.asset_selector
Responsibility: Scoped reads and dashboard counters over the registry.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - A team-scoped principal sees the assets currently held by someone in
      their team; full visibility sees every asset.
    - Regular listings and metrics exclude virtual machines unless asked;
      VM listings and metrics include only virtual machines.
"""

from __future__ import annotations

from collections import Counter
from uuid import UUID

from sqlalchemy import func, select

from asset_kernel.domain.access import AccessScope
from asset_kernel.domain.dtos import AssetInfo, AssetMetrics, CategoryInfo, VmMetrics
from asset_kernel.domain.intents import coerce_enum
from asset_kernel.domain.lifecycle import AssetStatus, AssignmentType, CategoryKind
from asset_kernel.exceptions import AssetNotFoundError, OutOfScopeError
from asset_kernel.models.asset import Asset, AssetCategory, VirtualMachineDetails
from asset_kernel.models.assignment import AssetAssignment
from asset_kernel.selectors.assignment_selector import (
    active_counts_by_asset,
    count_active_assignments,
)
from asset_kernel.selectors.base import BaseSelector
from asset_kernel.selectors.mapping import asset_to_info, category_to_info


class AssetSelector(BaseSelector[Asset]):

    def _team_held(self, scope: AccessScope):
        return (
            select(AssetAssignment.asset_id)
            .where(
                AssetAssignment.is_active == True,  # noqa: E712
                AssetAssignment.employee_id.in_(sorted(scope.team_filter)),
            )
        )

    def _scoped_assets(self, scope: AccessScope, *, virtual_machines: bool | None):
        """
        Base asset query for ``scope``.

        ``virtual_machines``: True for VMs only, False for regular only,
        None for both.
        """
        stmt = select(Asset).join(Asset.category)
        if virtual_machines is True:
            stmt = stmt.where(AssetCategory.kind == CategoryKind.VIRTUAL_MACHINE.value)
        elif virtual_machines is False:
            stmt = stmt.where(AssetCategory.kind == CategoryKind.REGULAR.value)
        if scope.team_filter is not None:
            stmt = stmt.where(Asset.id.in_(self._team_held(scope)))
        return stmt

    def _to_infos(self, assets: list[Asset]) -> list[AssetInfo]:
        counts = active_counts_by_asset(self.session, [a.id for a in assets])
        return [asset_to_info(a, counts.get(a.id, 0)) for a in assets]

    def get_asset(self, scope: AccessScope, asset_id: UUID) -> AssetInfo:
        asset = self.session.get(Asset, asset_id)
        if asset is None:
            raise AssetNotFoundError(str(asset_id))
        if scope.team_filter is not None:
            held = self.session.execute(
                self._team_held(scope).where(AssetAssignment.asset_id == asset_id)
            ).first()
            if held is None:
                raise OutOfScopeError(
                    str(scope.principal_id), "*", "asset is not held by the team"
                )
        return asset_to_info(asset, count_active_assignments(self.session, asset.id))

    def list_assets(
        self,
        scope: AccessScope,
        *,
        status: AssetStatus | str | None = None,
        category_id: UUID | None = None,
        include_virtual_machines: bool = False,
    ) -> list[AssetInfo]:
        stmt = self._scoped_assets(
            scope, virtual_machines=None if include_virtual_machines else False
        )
        if status is not None:
            stmt = stmt.where(Asset.status == coerce_enum(AssetStatus, "status", status).value)
        if category_id is not None:
            stmt = stmt.where(Asset.category_id == category_id)
        stmt = stmt.order_by(Asset.asset_tag)
        return self._to_infos(list(self.session.execute(stmt).unique().scalars().all()))

    def list_virtual_machines(
        self,
        scope: AccessScope,
        *,
        status: AssetStatus | str | None = None,
    ) -> list[AssetInfo]:
        stmt = self._scoped_assets(scope, virtual_machines=True)
        if status is not None:
            stmt = stmt.where(Asset.status == coerce_enum(AssetStatus, "status", status).value)
        stmt = stmt.order_by(Asset.asset_tag)
        return self._to_infos(list(self.session.execute(stmt).unique().scalars().all()))

    def list_categories(self, kind: CategoryKind | str | None = None) -> list[CategoryInfo]:
        stmt = select(AssetCategory).order_by(AssetCategory.name_key)
        if kind is not None:
            stmt = stmt.where(AssetCategory.kind == coerce_enum(CategoryKind, "kind", kind).value)
        return [category_to_info(c) for c in self.session.execute(stmt).scalars().all()]

    # ------------------------------------------------------------------
    # Dashboard metrics
    # ------------------------------------------------------------------

    def asset_metrics(self, scope: AccessScope) -> AssetMetrics:
        """Counters for regular assets in scope."""
        assets = self.session.execute(
            self._scoped_assets(scope, virtual_machines=False)
        ).unique().scalars().all()
        by_status = {status: 0 for status in AssetStatus}
        by_status.update(Counter(AssetStatus(a.status) for a in assets))

        entries = (
            select(func.count(AssetAssignment.id))
            .join(AssetAssignment.asset)
            .join(Asset.category)
            .where(
                AssetAssignment.is_active == True,  # noqa: E712
                AssetCategory.kind == CategoryKind.REGULAR.value,
            )
        )
        if scope.team_filter is not None:
            entries = entries.where(AssetAssignment.employee_id.in_(sorted(scope.team_filter)))
        overdue = entries.where(
            AssetAssignment.assignment_type == AssignmentType.TEMPORARY.value,
            AssetAssignment.expiry_date < self.clock.today(),
        )

        return AssetMetrics(
            total=len(assets),
            by_status=by_status,
            active_assignments=self.session.execute(entries).scalar_one(),
            overdue_assignments=self.session.execute(overdue).scalar_one(),
        )

    def vm_metrics(self, scope: AccessScope) -> VmMetrics:
        """Counters for virtual machines in scope, by status, location, provider and audit."""
        vms = self.session.execute(
            self._scoped_assets(scope, virtual_machines=True)
        ).unique().scalars().all()
        by_status = {status: 0 for status in AssetStatus}
        by_status.update(Counter(AssetStatus(a.status) for a in vms))

        details: list[VirtualMachineDetails] = [a.virtual_machine for a in vms if a.virtual_machine]
        return VmMetrics(
            total=len(vms),
            by_status=by_status,
            by_location=dict(Counter(d.vm_location or "unspecified" for d in details)),
            by_cloud_provider=dict(Counter(d.cloud_provider or "unspecified" for d in details)),
            by_audit_status=dict(Counter(d.audit_status for d in details)),
        )
