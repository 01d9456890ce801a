"""
Asset lifecycle -- statuses, conditions and the rules that connect them.

Responsibility:
    Pure functions deciding an asset's status.  The ledger and the registry
    call these; neither stores a status without going through them.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - ``available`` and ``assigned`` are ledger-driven: an asset in either
      is ``assigned`` iff it has at least one active assignment.
    - ``maintenance``, ``retired``, ``lost`` and ``archived`` are sticky:
      the ledger never moves an asset out of them.
    - ``condition == damaged`` forces ``archived`` unless the same mutation
      carries an explicit status.
    - Explicit moves between sticky statuses follow
      ``ASSET_STATUS_TRANSITIONS``; leaving a sticky status for the ledger
      is a restore and is always permitted.
"""

from enum import Enum


class AssetStatus(str, Enum):
    """Asset lifecycle states."""

    AVAILABLE = "available"
    ASSIGNED = "assigned"
    MAINTENANCE = "maintenance"
    RETIRED = "retired"
    LOST = "lost"
    ARCHIVED = "archived"


class AssetCondition(str, Enum):
    """Physical condition, best to worst."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    DAMAGED = "damaged"


class CategoryKind(str, Enum):
    """Regular assets and virtual machines share one registry."""

    REGULAR = "regular"
    VIRTUAL_MACHINE = "virtual_machine"


class AssignmentType(str, Enum):
    PERMANENT = "permanent"
    TEMPORARY = "temporary"


class LogAction(str, Enum):
    """What a single assignment log entry records."""

    ASSIGNED = "assigned"
    UNASSIGNED = "unassigned"  # single employee returned the asset
    RETURNED = "returned"  # whole asset taken back from everyone
    EXPIRED = "expired"  # temporary assignment closed by the expiry sweep
    TRANSFERRED = "transferred"
    UPDATED = "updated"
    DELETED = "deleted"


class LogEntryStatus(str, Enum):
    """State of the assignment after the logged action."""

    ACTIVE = "active"
    RETURNED = "returned"


LEDGER_DRIVEN_STATUSES: frozenset[AssetStatus] = frozenset({
    AssetStatus.AVAILABLE,
    AssetStatus.ASSIGNED,
})

STICKY_STATUSES: frozenset[AssetStatus] = frozenset({
    AssetStatus.MAINTENANCE,
    AssetStatus.RETIRED,
    AssetStatus.LOST,
    AssetStatus.ARCHIVED,
})

# Maintenance assets can still be handed out (loaners under repair).
UNASSIGNABLE_STATUSES: frozenset[AssetStatus] = frozenset({
    AssetStatus.RETIRED,
    AssetStatus.LOST,
    AssetStatus.ARCHIVED,
})

# Explicit, operator-driven moves into sticky statuses.
ASSET_STATUS_TRANSITIONS: dict[AssetStatus, frozenset[AssetStatus]] = {
    AssetStatus.AVAILABLE: frozenset({
        AssetStatus.MAINTENANCE,
        AssetStatus.RETIRED,
        AssetStatus.LOST,
        AssetStatus.ARCHIVED,
    }),
    AssetStatus.ASSIGNED: frozenset({
        AssetStatus.MAINTENANCE,
        AssetStatus.RETIRED,
        AssetStatus.LOST,
        AssetStatus.ARCHIVED,
    }),
    AssetStatus.MAINTENANCE: frozenset({
        AssetStatus.RETIRED,
        AssetStatus.LOST,
        AssetStatus.ARCHIVED,
    }),
    AssetStatus.LOST: frozenset({
        AssetStatus.RETIRED,
        AssetStatus.ARCHIVED,
    }),
    AssetStatus.RETIRED: frozenset({
        AssetStatus.ARCHIVED,
    }),
    AssetStatus.ARCHIVED: frozenset(),
}


def ledger_status(active_count: int) -> AssetStatus:
    """Status the ledger alone would give an asset."""
    return AssetStatus.ASSIGNED if active_count > 0 else AssetStatus.AVAILABLE


def derive_status(current: AssetStatus, active_count: int) -> AssetStatus:
    """
    Status after a ledger mutation.

    Sticky statuses are left alone; otherwise the active count decides.
    """
    current = AssetStatus(current)
    if current in STICKY_STATUSES:
        return current
    return ledger_status(active_count)


def apply_damage_rule(
    condition: AssetCondition,
    status: AssetStatus,
    explicit_status: bool,
) -> AssetStatus:
    """Damaged assets are archived unless the caller chose a status in the same mutation."""
    if AssetCondition(condition) == AssetCondition.DAMAGED and not explicit_status:
        return AssetStatus.ARCHIVED
    return AssetStatus(status)


def is_valid_explicit_transition(current: AssetStatus, target: AssetStatus) -> bool:
    """
    Whether an operator may set ``target`` on an asset currently in ``current``.

    Ledger-driven targets are a restore (or a no-op) and always allowed.
    Re-entering the current sticky status is not a move.
    """
    current = AssetStatus(current)
    target = AssetStatus(target)
    if target in LEDGER_DRIVEN_STATUSES:
        return True
    if target == current:
        return False
    return target in ASSET_STATUS_TRANSITIONS[current]
