"""Scoped reads over asset requests and complaints."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select

from asset_kernel.domain.access import AccessScope
from asset_kernel.domain.dtos import ComplaintInfo, RequestInfo
from asset_kernel.domain.intents import coerce_enum
from asset_kernel.domain.workflow import ComplaintStatus, RequestStatus
from asset_kernel.exceptions import ComplaintNotFoundError, RequestNotFoundError
from asset_kernel.models.complaint import AssetComplaint
from asset_kernel.models.request import AssetRequest
from asset_kernel.selectors.base import BaseSelector
from asset_kernel.selectors.mapping import complaint_to_info, request_to_info


class RequestSelector(BaseSelector[AssetRequest]):

    def get_request(self, scope: AccessScope, request_id: UUID) -> RequestInfo:
        request = self.session.get(AssetRequest, request_id)
        if request is None:
            raise RequestNotFoundError(str(request_id))
        scope.require_visible(request.requester_id)
        return request_to_info(request)

    def list_requests(
        self,
        scope: AccessScope,
        *,
        status: RequestStatus | str | None = None,
        requester_id: UUID | None = None,
    ) -> list[RequestInfo]:
        """Requests visible to ``scope``, newest first."""
        stmt = select(AssetRequest)
        if scope.team_filter is not None:
            stmt = stmt.where(AssetRequest.requester_id.in_(sorted(scope.team_filter)))
        if status is not None:
            stmt = stmt.where(
                AssetRequest.status == coerce_enum(RequestStatus, "status", status).value
            )
        if requester_id is not None:
            stmt = stmt.where(AssetRequest.requester_id == requester_id)
        stmt = stmt.order_by(AssetRequest.created_at.desc(), AssetRequest.id)

        return [request_to_info(r) for r in self.session.execute(stmt).unique().scalars().all()]


class ComplaintSelector(BaseSelector[AssetComplaint]):

    def get_complaint(self, scope: AccessScope, complaint_id: UUID) -> ComplaintInfo:
        complaint = self.session.get(AssetComplaint, complaint_id)
        if complaint is None:
            raise ComplaintNotFoundError(str(complaint_id))
        scope.require_visible(complaint.employee_id)
        return complaint_to_info(complaint)

    def list_complaints(
        self,
        scope: AccessScope,
        *,
        status: ComplaintStatus | str | None = None,
        asset_id: UUID | None = None,
        employee_id: UUID | None = None,
    ) -> list[ComplaintInfo]:
        """Complaints visible to ``scope``, newest first."""
        stmt = select(AssetComplaint)
        if scope.team_filter is not None:
            stmt = stmt.where(AssetComplaint.employee_id.in_(sorted(scope.team_filter)))
        if status is not None:
            stmt = stmt.where(
                AssetComplaint.status == coerce_enum(ComplaintStatus, "status", status).value
            )
        if asset_id is not None:
            stmt = stmt.where(AssetComplaint.asset_id == asset_id)
        if employee_id is not None:
            stmt = stmt.where(AssetComplaint.employee_id == employee_id)
        stmt = stmt.order_by(AssetComplaint.created_at.desc(), AssetComplaint.id)

        return [complaint_to_info(c) for c in self.session.execute(stmt).unique().scalars().all()]
