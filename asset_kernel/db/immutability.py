"""
ORM-Level Immutability Enforcement for the assignment log.

===============================================================================
WHY THIS EXISTS
===============================================================================

The assignment log is the audit trail for who held which asset and when.
Rows are appended by the ledger and never changed.  Administrative deletion
of an assignment appends a ``deleted`` row; it does not touch earlier rows.

===============================================================================
HOW IT WORKS
===============================================================================

SQLAlchemy fires events before UPDATE/DELETE operations reach the database:

    session.flush()
         |
         v
    [before_update event] --> _check_log_entry_update() --> ImmutabilityViolationError
         |
         v
    [before_delete event] --> _check_log_entry_delete() --> ImmutabilityViolationError
         |
         v
    SQL sent to database (only if checks pass)

Bulk ``session.execute(update(...))`` statements bypass mapper events; the
ledger never issues them against the log table.

Usage:
    from asset_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()  # Called once at startup
"""

from sqlalchemy import event

from asset_kernel.exceptions import ImmutabilityViolationError
from asset_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _check_log_entry_update(mapper, connection, target):
    """Prevent any update to AssignmentLogEntry rows."""
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "AssignmentLogEntry",
            "entity_id": str(target.id),
            "operation": "UPDATE",
        },
    )
    raise ImmutabilityViolationError(
        entity_type="AssignmentLogEntry",
        entity_id=str(target.id),
        reason="Assignment log entries are append-only and cannot be modified",
    )


def _check_log_entry_delete(mapper, connection, target):
    """Prevent deletion of AssignmentLogEntry rows."""
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "AssignmentLogEntry",
            "entity_id": str(target.id),
            "operation": "DELETE",
        },
    )
    raise ImmutabilityViolationError(
        entity_type="AssignmentLogEntry",
        entity_id=str(target.id),
        reason="Assignment log entries cannot be deleted",
    )


def register_immutability_listeners():
    """
    Register the append-only listeners on the assignment log.

    Call this after the models are imported but before any database
    operations begin.  Calling it twice is harmless.
    """
    from asset_kernel.models.assignment import AssignmentLogEntry

    if not event.contains(AssignmentLogEntry, "before_update", _check_log_entry_update):
        event.listen(AssignmentLogEntry, "before_update", _check_log_entry_update)
    if not event.contains(AssignmentLogEntry, "before_delete", _check_log_entry_delete):
        event.listen(AssignmentLogEntry, "before_delete", _check_log_entry_delete)


def _safe_remove_listener(target, event_name, listener_fn):
    if event.contains(target, event_name, listener_fn):
        event.remove(target, event_name, listener_fn)


def unregister_immutability_listeners():
    """
    Remove the append-only listeners.

    WARNING: Only use this in tests where you need to intentionally
    violate immutability rules to verify detection.
    """
    from asset_kernel.models.assignment import AssignmentLogEntry

    _safe_remove_listener(AssignmentLogEntry, "before_update", _check_log_entry_update)
    _safe_remove_listener(AssignmentLogEntry, "before_delete", _check_log_entry_delete)
