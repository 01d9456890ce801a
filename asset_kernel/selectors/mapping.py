"""ORM row -> DTO conversion shared by services and selectors."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any, TypeVar

from asset_kernel.domain.dtos import (
    AssetInfo,
    AssignmentInfo,
    AssignmentLogInfo,
    CategoryInfo,
    ComplaintInfo,
    ConditionImageInfo,
    RequestInfo,
    VirtualMachineInfo,
)
from asset_kernel.domain.lifecycle import (
    AssetCondition,
    AssetStatus,
    AssignmentType,
    CategoryKind,
    LogAction,
    LogEntryStatus,
)
from asset_kernel.domain.virtual_machine import (
    CloudProvider,
    VmAccessType,
    VmAuditStatus,
    VmLocation,
    VmPurpose,
    VmUserType,
)
from asset_kernel.domain.workflow import ComplaintStatus, Priority, RequestStatus
from asset_kernel.models.asset import Asset, AssetCategory, VirtualMachineDetails
from asset_kernel.models.assignment import AssetAssignment, AssignmentLogEntry
from asset_kernel.models.complaint import AssetComplaint
from asset_kernel.models.condition_image import AssetConditionImage
from asset_kernel.models.request import AssetRequest

E = TypeVar("E", bound=Enum)


def _opt(enum_cls: type[E], value: Any) -> E | None:
    return enum_cls(value) if value is not None else None


def is_overdue(entry: AssetAssignment, today: date) -> bool:
    """Active temporary entry whose expiry date has passed."""
    return (
        entry.is_active
        and entry.assignment_type == AssignmentType.TEMPORARY
        and entry.expiry_date is not None
        and entry.expiry_date < today
    )


def category_to_info(category: AssetCategory) -> CategoryInfo:
    return CategoryInfo(
        id=category.id,
        name=category.name,
        description=category.description,
        kind=CategoryKind(category.kind),
    )


def vm_to_info(vm: VirtualMachineDetails) -> VirtualMachineInfo:
    return VirtualMachineInfo(
        vm_number=vm.vm_number,
        vm_location=_opt(VmLocation, vm.vm_location),
        access_type=_opt(VmAccessType, vm.access_type),
        current_user_type=_opt(VmUserType, vm.current_user_type),
        purpose=_opt(VmPurpose, vm.purpose),
        project_name=vm.project_name,
        username=vm.username,
        ip_address=vm.ip_address,
        ghost_ip=vm.ghost_ip,
        vpn_required=vm.vpn_required,
        mfa_enabled=vm.mfa_enabled,
        cloud_provider=_opt(CloudProvider, vm.cloud_provider),
        backup_enabled=vm.backup_enabled,
        audit_status=VmAuditStatus(vm.audit_status),
        requested_by_id=vm.requested_by_id,
        approved_by_id=vm.approved_by_id,
        request_ticket_id=vm.request_ticket_id,
        approval_date=vm.approval_date,
        expiry_date=vm.expiry_date,
    )


def asset_to_info(asset: Asset, active_count: int) -> AssetInfo:
    # Details on an asset moved out of a VM category stay stored but inert.
    vm = asset.virtual_machine if asset.is_virtual_machine else None
    return AssetInfo(
        id=asset.id,
        asset_tag=asset.asset_tag,
        name=asset.name,
        category_id=asset.category_id,
        category_name=asset.category.name,
        category_kind=CategoryKind(asset.category.kind),
        condition=AssetCondition(asset.condition),
        status=AssetStatus(asset.status),
        brand=asset.brand,
        model=asset.model,
        serial_number=asset.serial_number,
        location=asset.location,
        purchase_date=asset.purchase_date,
        warranty_expiry=asset.warranty_expiry,
        insurance_warranty_extended=asset.insurance_warranty_extended,
        previous_audit_date=asset.previous_audit_date,
        hardware_image_date=asset.hardware_image_date,
        invoice_copy_link=asset.invoice_copy_link,
        warranty_document_link=asset.warranty_document_link,
        notes=asset.notes,
        active_assignment_count=active_count,
        virtual_machine=vm_to_info(vm) if vm is not None else None,
    )


def assignment_to_info(entry: AssetAssignment, today: date) -> AssignmentInfo:
    return AssignmentInfo(
        id=entry.id,
        asset_id=entry.asset_id,
        asset_tag=entry.asset.asset_tag,
        asset_name=entry.asset.name,
        category_name=entry.asset.category.name,
        employee_id=entry.employee_id,
        employee_name=entry.employee_name,
        employee_department=entry.employee_department,
        employee_manager=entry.employee_manager,
        assigned_by_id=entry.assigned_by_id,
        assignment_type=AssignmentType(entry.assignment_type),
        expiry_date=entry.expiry_date,
        condition_at_issuance=_opt(AssetCondition, entry.condition_at_issuance),
        issuance_condition_notes=entry.issuance_condition_notes,
        notes=entry.notes,
        is_active=entry.is_active,
        assigned_at=entry.assigned_at,
        return_date=entry.return_date,
        return_condition=_opt(AssetCondition, entry.return_condition),
        return_condition_notes=entry.return_condition_notes,
        is_overdue=is_overdue(entry, today),
    )


def log_to_info(log: AssignmentLogEntry) -> AssignmentLogInfo:
    return AssignmentLogInfo(
        id=log.id,
        seq=log.seq,
        assignment_id=log.assignment_id,
        asset_id=log.asset_id,
        employee_id=log.employee_id,
        action=LogAction(log.action),
        status=LogEntryStatus(log.status),
        previous_status=_opt(LogEntryStatus, log.previous_status),
        previous_employee_id=log.previous_employee_id,
        assignment_type=AssignmentType(log.assignment_type),
        expiry_date=log.expiry_date,
        condition_at_action=_opt(AssetCondition, log.condition_at_action),
        condition_notes=log.condition_notes,
        action_by_id=log.action_by_id,
        action_date=log.action_date,
        action_notes=log.action_notes,
        asset_name=log.asset_name,
        asset_tag=log.asset_tag,
        asset_category=log.asset_category,
        employee_name=log.employee_name,
        employee_code=log.employee_code,
        employee_department=log.employee_department,
    )


def request_to_info(request: AssetRequest) -> RequestInfo:
    return RequestInfo(
        id=request.id,
        requester_id=request.requester_id,
        requester_name=request.requester_name,
        category_id=request.category_id,
        category_name=request.category.name,
        description=request.description,
        justification=request.justification,
        priority=Priority(request.priority),
        status=RequestStatus(request.status),
        approved_by_id=request.approved_by_id,
        approved_at=request.approved_at,
        approval_notes=request.approval_notes,
        rejected_by_id=request.rejected_by_id,
        rejected_at=request.rejected_at,
        rejection_reason=request.rejection_reason,
        fulfilled_by_id=request.fulfilled_by_id,
        fulfilled_at=request.fulfilled_at,
        fulfilled_asset_id=request.fulfilled_asset_id,
        fulfilled_assignment_id=request.fulfilled_assignment_id,
        created_at=request.created_at,
    )


def complaint_to_info(complaint: AssetComplaint) -> ComplaintInfo:
    return ComplaintInfo(
        id=complaint.id,
        asset_id=complaint.asset_id,
        asset_tag=complaint.asset.asset_tag,
        asset_name=complaint.asset.name,
        assignment_id=complaint.assignment_id,
        employee_id=complaint.employee_id,
        description=complaint.description,
        status=ComplaintStatus(complaint.status),
        priority=Priority(complaint.priority),
        resolved_by_id=complaint.resolved_by_id,
        resolved_at=complaint.resolved_at,
        resolution_notes=complaint.resolution_notes,
        created_at=complaint.created_at,
    )


def condition_image_to_info(image: AssetConditionImage) -> ConditionImageInfo:
    return ConditionImageInfo(
        id=image.id,
        assignment_id=image.assignment_id,
        asset_id=image.asset_id,
        employee_id=image.employee_id,
        image_url=image.image_url,
        image_filename=image.image_filename,
        image_size_bytes=image.image_size_bytes,
        upload_year=image.upload_year,
        upload_quarter=image.upload_quarter,
        uploaded_at=image.uploaded_at,
    )
