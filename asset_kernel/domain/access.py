"""
Access scope -- what a principal may see and do.

Responsibility:
    Defines the capabilities the console grants, the ``AccessScope`` value
    object that every service and selector call receives, and the
    ``CapabilityResolver`` contract used to turn a principal's roles into
    capabilities.

Architecture position:
    Kernel > Domain -- pure value objects, zero I/O.  Resolution against the
    employee directory happens in ``services/access_service.py``.

Invariants enforced:
    - ``full_visibility`` is True exactly when ``team_filter`` is None.
    - A team-scoped principal always sees its own records (its own id is
      part of the team filter).
    - Capability and visibility violations raise ``AuthorizationError``
      subclasses; nothing is silently skipped.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol
from uuid import UUID

from asset_kernel.exceptions import MissingCapabilityError, OutOfScopeError


class Capability(str, Enum):
    """Fine-grained permissions granted to principals."""

    VIEW_ALL = "view_all"
    MANAGE_ASSETS = "manage_assets"
    MANAGE_VIRTUAL_MACHINES = "manage_virtual_machines"
    APPROVE_REQUESTS = "approve_requests"
    FULFILL_REQUESTS = "fulfill_requests"
    RESOLVE_COMPLAINTS = "resolve_complaints"


ALL_CAPABILITIES: frozenset[Capability] = frozenset(Capability)


@dataclass(frozen=True)
class Principal:
    """The authenticated caller.  ``principal_id`` is the caller's employee id."""

    principal_id: UUID
    roles: frozenset[str] = field(default_factory=frozenset)


class CapabilityResolver(Protocol):
    """Maps a principal to the capabilities it holds."""

    def capabilities_for(self, principal: Principal) -> frozenset[Capability]:
        ...


class RoleCapabilityResolver:
    """
    Capability resolver driven by a role -> capabilities table.

    Unknown roles grant nothing.
    """

    def __init__(self, bindings: Mapping[str, Iterable[Capability | str]]):
        self._bindings: dict[str, frozenset[Capability]] = {
            role: frozenset(Capability(c) for c in caps)
            for role, caps in bindings.items()
        }

    def capabilities_for(self, principal: Principal) -> frozenset[Capability]:
        granted: set[Capability] = set()
        for role in principal.roles:
            granted |= self._bindings.get(role, frozenset())
        return frozenset(granted)

    @property
    def roles(self) -> tuple[str, ...]:
        return tuple(sorted(self._bindings))


@dataclass(frozen=True)
class AccessScope:
    """
    Resolved visibility and permissions for one principal.

    ``team_filter`` is the set of employee ids whose records the principal
    may see; None means everything.
    """

    principal_id: UUID
    full_visibility: bool
    team_filter: frozenset[UUID] | None
    capabilities: frozenset[Capability] = frozenset()

    def __post_init__(self) -> None:
        if self.full_visibility != (self.team_filter is None):
            raise ValueError(
                "full_visibility must be True exactly when team_filter is None"
            )

    @classmethod
    def system(cls, actor_id: UUID) -> AccessScope:
        """Unrestricted scope for maintenance jobs (expiry sweep, seeding)."""
        return cls(
            principal_id=actor_id,
            full_visibility=True,
            team_filter=None,
            capabilities=ALL_CAPABILITIES,
        )

    def has(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def require(self, capability: Capability) -> None:
        if capability not in self.capabilities:
            raise MissingCapabilityError(str(self.principal_id), capability.value)

    def can_see(self, employee_id: UUID) -> bool:
        return self.team_filter is None or employee_id in self.team_filter

    def require_visible(self, employee_id: UUID) -> None:
        if not self.can_see(employee_id):
            raise OutOfScopeError(str(self.principal_id), str(employee_id))

    def require_full_visibility(self, reason: str) -> None:
        if not self.full_visibility:
            raise OutOfScopeError(str(self.principal_id), "*", reason)

    def require_self_or_full(self, employee_id: UUID, reason: str) -> None:
        """Only the employee themself or a full-visibility principal may act."""
        if not (self.full_visibility or employee_id == self.principal_id):
            raise OutOfScopeError(str(self.principal_id), str(employee_id), reason)

    def require_approver_of(self, employee_id: UUID) -> None:
        """Team approvers decide for their reports, never for themselves."""
        self.require_visible(employee_id)
        if not self.full_visibility and employee_id == self.principal_id:
            raise OutOfScopeError(
                str(self.principal_id), str(employee_id), "own requests go to the next approver"
            )

    def require_asset_management(self, *, virtual_machine: bool) -> None:
        """Registry and ledger writes need full visibility and the matching capability."""
        self.require_full_visibility("asset management needs full visibility")
        if virtual_machine:
            self.require(Capability.MANAGE_VIRTUAL_MACHINES)
        else:
            self.require(Capability.MANAGE_ASSETS)
