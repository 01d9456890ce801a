"""
asset_kernel.services.request_service -- Asset request workflow.

Responsibility:
    Employees ask for an asset of some category; approvers approve or
    reject; fulfillers hand over a concrete asset.

Architecture position:
    Kernel > Services.  Fulfilment writes through ``LedgerService`` so the
    ledger's invariants hold for request-driven assignments too.

Invariants enforced:
    - pending -> approved | rejected, approved -> fulfilled.  Nothing else.
    - Only pending requests may be edited.
    - A fulfilled request always names the asset handed over, and the
      ledger entry for that hand-over exists.  The status change and the
      assignment commit together or not at all.
    - A rejection always carries a reason.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from asset_kernel.domain.access import AccessScope, Capability
from asset_kernel.domain.clock import Clock
from asset_kernel.domain.dtos import RequestInfo
from asset_kernel.domain.intents import AssignmentDetails, coerce_enum, reject_unknown_fields
from asset_kernel.domain.workflow import Priority, RequestStatus, can_transition_request
from asset_kernel.exceptions import (
    CategoryNotFoundError,
    EmployeeNotFoundError,
    InvalidRequestTransitionError,
    MissingFieldError,
    RequestNotFoundError,
    RequestNotPendingError,
)
from asset_kernel.logging_config import LogContext, get_logger
from asset_kernel.models.asset import AssetCategory
from asset_kernel.models.request import AssetRequest
from asset_kernel.selectors.mapping import request_to_info
from asset_kernel.services.base import BaseService
from asset_kernel.services.ledger_service import LedgerService

logger = get_logger("services.request")

REQUEST_PATCH_FIELDS: frozenset[str] = frozenset({
    "category_id",
    "description",
    "justification",
    "priority",
})


class RequestService(BaseService[AssetRequest]):
    """Drives asset requests through their state machine."""

    def __init__(self, session: Session, ledger: LedgerService, clock: Clock | None = None):
        super().__init__(session, clock or ledger.clock)
        self.ledger = ledger

    def _get(self, request_id: UUID) -> AssetRequest:
        request = self.session.get(AssetRequest, request_id)
        if request is None:
            raise RequestNotFoundError(str(request_id))
        return request

    def _check_category(self, category_id: UUID | None) -> None:
        if category_id is None:
            raise MissingFieldError("category_id", "asset_request")
        if self.session.get(AssetCategory, category_id) is None:
            raise CategoryNotFoundError(str(category_id))

    def _move(self, request: AssetRequest, target: RequestStatus) -> RequestStatus:
        current = RequestStatus(request.status)
        if not can_transition_request(current, target):
            raise InvalidRequestTransitionError(str(request.id), current.value, target.value)
        request.status = target.value
        return current

    def create_request(
        self,
        scope: AccessScope,
        requester_id: UUID,
        category_id: UUID,
        description: str,
        justification: str | None = None,
        priority: Priority | str = Priority.MEDIUM,
    ) -> RequestInfo:
        """File a request on behalf of ``requester_id`` (normally the caller)."""
        scope.require_self_or_full(requester_id, "requests are filed by the requester")
        requester = self.ledger.directory.get(requester_id)
        if requester is None:
            raise EmployeeNotFoundError(str(requester_id))
        self._check_category(category_id)
        if not (description or "").strip():
            raise MissingFieldError("description", "asset_request")

        request = AssetRequest(
            requester_id=requester_id,
            requester_name=requester.name,
            category_id=category_id,
            description=description.strip(),
            justification=justification,
            priority=coerce_enum(Priority, "priority", priority).value,
            status=RequestStatus.PENDING.value,
            created_at=self.clock.now(),
            created_by_id=scope.principal_id,
        )
        self.session.add(request)
        self.session.flush()

        logger.info(
            "request_created",
            extra={
                "request_id": str(request.id),
                "requester_id": str(requester_id),
                "category_id": str(category_id),
                "priority": request.priority,
            },
        )
        return request_to_info(request)

    def update_request(
        self,
        scope: AccessScope,
        request_id: UUID,
        changes: Mapping[str, Any],
    ) -> RequestInfo:
        """Edit a request.  Allowed only while it is pending."""
        reject_unknown_fields(changes, REQUEST_PATCH_FIELDS)
        request = self._get(request_id)
        scope.require_self_or_full(request.requester_id, "only the requester edits a request")
        if request.status != RequestStatus.PENDING:
            raise RequestNotPendingError(str(request.id), request.status)

        if "category_id" in changes:
            self._check_category(changes["category_id"])
            request.category_id = changes["category_id"]
        if "description" in changes:
            if not (changes["description"] or "").strip():
                raise MissingFieldError("description", "asset_request")
            request.description = changes["description"].strip()
        if "justification" in changes:
            request.justification = changes["justification"]
        if "priority" in changes:
            request.priority = coerce_enum(Priority, "priority", changes["priority"]).value
        request.updated_by_id = scope.principal_id
        self.session.flush()
        # Reload the joined category after a category change.
        self.session.refresh(request)

        logger.info(
            "request_updated",
            extra={"request_id": str(request.id), "fields": sorted(changes)},
        )
        return request_to_info(request)

    def approve(self, scope: AccessScope, request_id: UUID, notes: str | None = None) -> RequestInfo:
        scope.require(Capability.APPROVE_REQUESTS)
        request = self._get(request_id)
        scope.require_approver_of(request.requester_id)

        previous = self._move(request, RequestStatus.APPROVED)
        request.approved_by_id = scope.principal_id
        request.approved_at = self.clock.now()
        request.approval_notes = notes
        request.updated_by_id = scope.principal_id
        self.session.flush()

        logger.info(
            "request_approved",
            extra={
                "request_id": str(request.id),
                "from_status": previous.value,
                "approved_by_id": str(scope.principal_id),
            },
        )
        return request_to_info(request)

    def reject(self, scope: AccessScope, request_id: UUID, reason: str) -> RequestInfo:
        scope.require(Capability.APPROVE_REQUESTS)
        request = self._get(request_id)
        scope.require_approver_of(request.requester_id)
        if not (reason or "").strip():
            raise MissingFieldError("rejection_reason", "asset_request")

        previous = self._move(request, RequestStatus.REJECTED)
        request.rejected_by_id = scope.principal_id
        request.rejected_at = self.clock.now()
        request.rejection_reason = reason.strip()
        request.updated_by_id = scope.principal_id
        self.session.flush()

        logger.info(
            "request_rejected",
            extra={
                "request_id": str(request.id),
                "from_status": previous.value,
                "rejected_by_id": str(scope.principal_id),
            },
        )
        return request_to_info(request)

    def fulfill(
        self,
        scope: AccessScope,
        request_id: UUID,
        fulfilled_asset_id: UUID | None,
        details: AssignmentDetails | None = None,
    ) -> RequestInfo:
        """
        Hand over ``fulfilled_asset_id`` to the requester and close the request.

        The ledger assignment and the status change share one SAVEPOINT.  If
        the asset cannot be assigned (archived, already held by the
        requester, ...) the request stays approved.

        Raises:
            MissingCapabilityError: Without ``fulfill_requests``, or without
                the management capability for the asset.
            InvalidRequestTransitionError: Unless the request is approved.
            MissingFieldError: If no asset is given.
        """
        scope.require(Capability.FULFILL_REQUESTS)
        request = self._get(request_id)
        current = RequestStatus(request.status)
        if not can_transition_request(current, RequestStatus.FULFILLED):
            raise InvalidRequestTransitionError(
                str(request.id), current.value, RequestStatus.FULFILLED.value
            )
        if fulfilled_asset_id is None:
            raise MissingFieldError("fulfilled_asset_id", "asset_request")

        with LogContext.bind(request_id=request.id, asset_id=fulfilled_asset_id):
            with self.session.begin_nested():
                (entry,) = self.ledger.assign(
                    scope,
                    fulfilled_asset_id,
                    [request.requester_id],
                    details or AssignmentDetails(notes=f"Fulfils request {request.id}"),
                )
                self._move(request, RequestStatus.FULFILLED)
                request.fulfilled_by_id = scope.principal_id
                request.fulfilled_at = self.clock.now()
                request.fulfilled_asset_id = fulfilled_asset_id
                request.fulfilled_assignment_id = entry.id
                request.updated_by_id = scope.principal_id
                self.session.flush()

            logger.info(
                "request_fulfilled",
                extra={
                    "assignment_id": str(entry.id),
                    "requester_id": str(request.requester_id),
                },
            )
        return request_to_info(request)
