"""
asset_kernel.services.access_service -- Principal -> AccessScope resolution.

Responsibility:
    Combines the capability resolver with the employee directory to build
    the ``AccessScope`` passed into every service and selector call.

Invariants enforced:
    - ``view_all`` gives full visibility (no team filter).
    - Everyone else sees themself plus their direct reports.  An employee
      with no reports sees only their own records.
"""

from __future__ import annotations

from asset_kernel.domain.access import (
    AccessScope,
    Capability,
    CapabilityResolver,
    Principal,
)
from asset_kernel.domain.directory import EmployeeDirectory
from asset_kernel.logging_config import get_logger

logger = get_logger("services.access")


class AccessResolver:
    """Resolves a principal into its access scope."""

    def __init__(self, directory: EmployeeDirectory, capability_resolver: CapabilityResolver):
        self.directory = directory
        self.capability_resolver = capability_resolver

    def resolve(self, principal: Principal) -> AccessScope:
        capabilities = self.capability_resolver.capabilities_for(principal)

        if Capability.VIEW_ALL in capabilities:
            scope = AccessScope(
                principal_id=principal.principal_id,
                full_visibility=True,
                team_filter=None,
                capabilities=capabilities,
            )
        else:
            team = {principal.principal_id}
            team.update(r.employee_id for r in self.directory.direct_reports(principal.principal_id))
            scope = AccessScope(
                principal_id=principal.principal_id,
                full_visibility=False,
                team_filter=frozenset(team),
                capabilities=capabilities,
            )

        logger.debug(
            "access_scope_resolved",
            extra={
                "principal_id": str(principal.principal_id),
                "roles": sorted(principal.roles),
                "full_visibility": scope.full_visibility,
                "team_size": None if scope.team_filter is None else len(scope.team_filter),
                "capabilities": sorted(c.value for c in capabilities),
            },
        )
        return scope
