"""
asset_kernel.services.complaint_service -- Asset complaint workflow.

Invariants enforced:
    - A complaint is filed against an active assignment, by the employee
      holding it (or by a full-visibility principal on their behalf).
    - open -> in_progress | resolved | closed, in_progress -> resolved |
      closed, resolved -> closed.  closed is terminal.
    - Resolved and closed complaints name who resolved them.
    - Priority can change in any state; nothing escalates on its own.
"""

from __future__ import annotations

from uuid import UUID

from asset_kernel.domain.access import AccessScope, Capability
from asset_kernel.domain.dtos import ComplaintInfo
from asset_kernel.domain.intents import coerce_enum
from asset_kernel.domain.workflow import (
    RESOLVED_COMPLAINT_STATUSES,
    ComplaintStatus,
    Priority,
    can_transition_complaint,
)
from asset_kernel.exceptions import (
    AssignmentInactiveError,
    AssignmentNotFoundError,
    ComplaintNotFoundError,
    InvalidComplaintTransitionError,
    MissingFieldError,
)
from asset_kernel.logging_config import get_logger
from asset_kernel.models.assignment import AssetAssignment
from asset_kernel.models.complaint import AssetComplaint
from asset_kernel.selectors.mapping import complaint_to_info
from asset_kernel.services.base import BaseService

logger = get_logger("services.complaint")


class ComplaintService(BaseService[AssetComplaint]):
    """Files complaints and moves them through their state machine."""

    def _get(self, complaint_id: UUID) -> AssetComplaint:
        complaint = self.session.get(AssetComplaint, complaint_id)
        if complaint is None:
            raise ComplaintNotFoundError(str(complaint_id))
        return complaint

    def file_complaint(
        self,
        scope: AccessScope,
        assignment_id: UUID,
        description: str,
        priority: Priority | str = Priority.MEDIUM,
    ) -> ComplaintInfo:
        """Report a problem with an asset the employee currently holds."""
        entry = self.session.get(AssetAssignment, assignment_id)
        if entry is None:
            raise AssignmentNotFoundError(str(assignment_id))
        scope.require_self_or_full(entry.employee_id, "complaints are filed by the holder")
        if not entry.is_active:
            raise AssignmentInactiveError(str(entry.id))
        if not (description or "").strip():
            raise MissingFieldError("description", "asset_complaint")

        complaint = AssetComplaint(
            asset_id=entry.asset_id,
            assignment_id=entry.id,
            employee_id=entry.employee_id,
            description=description.strip(),
            status=ComplaintStatus.OPEN.value,
            priority=coerce_enum(Priority, "priority", priority).value,
            created_at=self.clock.now(),
            created_by_id=scope.principal_id,
        )
        self.session.add(complaint)
        self.session.flush()

        logger.info(
            "complaint_filed",
            extra={
                "complaint_id": str(complaint.id),
                "asset_id": str(entry.asset_id),
                "assignment_id": str(entry.id),
                "priority": complaint.priority,
            },
        )
        return complaint_to_info(complaint)

    def _transition(
        self,
        scope: AccessScope,
        complaint_id: UUID,
        target: ComplaintStatus,
        notes: str | None,
    ) -> ComplaintInfo:
        scope.require(Capability.RESOLVE_COMPLAINTS)
        complaint = self._get(complaint_id)
        scope.require_visible(complaint.employee_id)

        current = ComplaintStatus(complaint.status)
        if not can_transition_complaint(current, target):
            raise InvalidComplaintTransitionError(str(complaint.id), current.value, target.value)

        complaint.status = target.value
        if target in RESOLVED_COMPLAINT_STATUSES and complaint.resolved_by_id is None:
            complaint.resolved_by_id = scope.principal_id
            complaint.resolved_at = self.clock.now()
        if notes:
            complaint.resolution_notes = notes
        complaint.updated_by_id = scope.principal_id
        self.session.flush()

        logger.info(
            "complaint_status_changed",
            extra={
                "complaint_id": str(complaint.id),
                "from_status": current.value,
                "to_status": target.value,
            },
        )
        return complaint_to_info(complaint)

    def start_progress(self, scope: AccessScope, complaint_id: UUID) -> ComplaintInfo:
        return self._transition(scope, complaint_id, ComplaintStatus.IN_PROGRESS, None)

    def resolve(self, scope: AccessScope, complaint_id: UUID, notes: str | None = None) -> ComplaintInfo:
        return self._transition(scope, complaint_id, ComplaintStatus.RESOLVED, notes)

    def close(self, scope: AccessScope, complaint_id: UUID, notes: str | None = None) -> ComplaintInfo:
        """Close a complaint.  Closing an unresolved complaint records the closer as resolver."""
        return self._transition(scope, complaint_id, ComplaintStatus.CLOSED, notes)

    def change_priority(
        self,
        scope: AccessScope,
        complaint_id: UUID,
        priority: Priority | str,
    ) -> ComplaintInfo:
        """Change priority.  The reporter or a resolver in scope may do this in any state."""
        complaint = self._get(complaint_id)
        if not scope.has(Capability.RESOLVE_COMPLAINTS):
            scope.require_self_or_full(complaint.employee_id, "priority is set by the reporter")
        scope.require_visible(complaint.employee_id)

        previous = complaint.priority
        complaint.priority = coerce_enum(Priority, "priority", priority).value
        complaint.updated_by_id = scope.principal_id
        self.session.flush()

        logger.info(
            "complaint_priority_changed",
            extra={
                "complaint_id": str(complaint.id),
                "from_priority": previous,
                "to_priority": complaint.priority,
            },
        )
        return complaint_to_info(complaint)
