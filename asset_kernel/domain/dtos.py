"""
Read models returned by services and selectors.

Every public read and every mutation returns one of these frozen
dataclasses rather than an ORM row.  Each carries the denormalized display
fields (category name, employee name, department) the console renders, so
callers never need a second lookup.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from uuid import UUID

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


@dataclass(frozen=True)
class CategoryInfo:
    id: UUID
    name: str
    description: str | None
    kind: CategoryKind


@dataclass(frozen=True)
class VirtualMachineInfo:
    vm_number: str
    vm_location: VmLocation | None
    access_type: VmAccessType | None
    current_user_type: VmUserType | None
    purpose: VmPurpose | None
    project_name: str | None
    username: str | None
    ip_address: str | None
    ghost_ip: str | None
    vpn_required: bool
    mfa_enabled: bool
    cloud_provider: CloudProvider | None
    backup_enabled: bool
    audit_status: VmAuditStatus
    requested_by_id: UUID | None
    approved_by_id: UUID | None
    request_ticket_id: str | None
    approval_date: date | None
    expiry_date: date | None


@dataclass(frozen=True)
class AssetInfo:
    """An asset with its category and current holder count."""

    id: UUID
    asset_tag: str
    name: str
    category_id: UUID
    category_name: str
    category_kind: CategoryKind
    condition: AssetCondition
    status: AssetStatus
    brand: str | None
    model: str | None
    serial_number: str | None
    location: str | None
    purchase_date: date | None
    warranty_expiry: date | None
    insurance_warranty_extended: date | None
    previous_audit_date: date | None
    hardware_image_date: date | None
    invoice_copy_link: str | None
    warranty_document_link: str | None
    notes: str | None
    active_assignment_count: int
    virtual_machine: VirtualMachineInfo | None = None

    @property
    def is_virtual_machine(self) -> bool:
        return self.category_kind == CategoryKind.VIRTUAL_MACHINE


@dataclass(frozen=True)
class AssignmentInfo:
    """One ledger entry, with asset and employee display fields."""

    id: UUID
    asset_id: UUID
    asset_tag: str
    asset_name: str
    category_name: str
    employee_id: UUID
    employee_name: str
    employee_department: str | None
    employee_manager: str | None
    assigned_by_id: UUID
    assignment_type: AssignmentType
    expiry_date: date | None
    condition_at_issuance: AssetCondition | None
    issuance_condition_notes: str | None
    notes: str | None
    is_active: bool
    assigned_at: datetime
    return_date: datetime | None
    return_condition: AssetCondition | None
    return_condition_notes: str | None
    is_overdue: bool


@dataclass(frozen=True)
class AssignmentLogInfo:
    id: UUID
    seq: int
    assignment_id: UUID
    asset_id: UUID
    employee_id: UUID
    action: LogAction
    status: LogEntryStatus
    previous_status: LogEntryStatus | None
    previous_employee_id: UUID | None
    assignment_type: AssignmentType
    expiry_date: date | None
    condition_at_action: AssetCondition | None
    condition_notes: str | None
    action_by_id: UUID
    action_date: datetime
    action_notes: str | None
    asset_name: str
    asset_tag: str
    asset_category: str | None
    employee_name: str
    employee_code: str | None
    employee_department: str | None


@dataclass(frozen=True)
class RequestInfo:
    id: UUID
    requester_id: UUID
    requester_name: str | None
    category_id: UUID
    category_name: str
    description: str
    justification: str | None
    priority: Priority
    status: RequestStatus
    approved_by_id: UUID | None
    approved_at: datetime | None
    approval_notes: str | None
    rejected_by_id: UUID | None
    rejected_at: datetime | None
    rejection_reason: str | None
    fulfilled_by_id: UUID | None
    fulfilled_at: datetime | None
    fulfilled_asset_id: UUID | None
    fulfilled_assignment_id: UUID | None
    created_at: datetime


@dataclass(frozen=True)
class ComplaintInfo:
    id: UUID
    asset_id: UUID
    asset_tag: str
    asset_name: str
    assignment_id: UUID | None
    employee_id: UUID
    description: str
    status: ComplaintStatus
    priority: Priority
    resolved_by_id: UUID | None
    resolved_at: datetime | None
    resolution_notes: str | None
    created_at: datetime


@dataclass(frozen=True)
class ConditionImageInfo:
    id: UUID
    assignment_id: UUID
    asset_id: UUID
    employee_id: UUID
    image_url: str
    image_filename: str
    image_size_bytes: int | None
    upload_year: int
    upload_quarter: int
    uploaded_at: datetime


@dataclass(frozen=True)
class ConditionImagesDue:
    """An active hardware entry and its image count for the current quarter."""

    assignment_id: UUID
    asset_id: UUID
    asset_name: str
    asset_tag: str
    employee_id: UUID
    employee_name: str
    upload_year: int
    upload_quarter: int
    images_uploaded: int
    max_images_allowed: int


@dataclass(frozen=True)
class EmployeeHistoryRollup:
    """
    Per-employee summary of assignment activity.

    ``total_count`` counts log entries; ``assignment_count`` counts the
    distinct assignments those entries belong to.
    """

    employee_id: UUID
    employee_name: str
    employee_code: str | None
    department: str | None
    total_count: int
    assignment_count: int
    active_count: int
    last_action_date: datetime | None
    is_employee_active: bool

    @property
    def risk(self) -> bool:
        """Inactive employee still holding assets."""
        return not self.is_employee_active and self.active_count > 0


@dataclass(frozen=True)
class AssetMetrics:
    """Dashboard counters for regular (non-VM) assets."""

    total: int
    by_status: dict[AssetStatus, int] = field(default_factory=dict)
    active_assignments: int = 0
    overdue_assignments: int = 0


@dataclass(frozen=True)
class VmMetrics:
    total: int
    by_status: dict[AssetStatus, int] = field(default_factory=dict)
    by_location: dict[str, int] = field(default_factory=dict)
    by_cloud_provider: dict[str, int] = field(default_factory=dict)
    by_audit_status: dict[str, int] = field(default_factory=dict)
