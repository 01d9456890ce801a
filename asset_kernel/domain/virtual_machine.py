"""
Virtual machine attributes.

A virtual machine is an asset whose category kind is ``virtual_machine``.
It shares the asset status/condition lifecycle and carries the extra
provisioning fields below.  Credentials are never stored; only the login
username is kept.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from uuid import UUID


class VmLocation(str, Enum):
    INDIA = "india"
    US = "us"


class VmAccessType(str, Enum):
    LOCAL = "local"
    ADMIN = "admin"


class VmUserType(str, Enum):
    SINGLE = "single"
    MULTIPLE = "multiple"


class VmPurpose(str, Enum):
    CLIENT_PROJECT = "client_project"
    INTERNAL_PROJECT = "internal_project"


class CloudProvider(str, Enum):
    AWS = "aws"
    AZURE = "azure"
    GCP = "gcp"
    ON_PREM = "on_prem"


class VmAuditStatus(str, Enum):
    COMPLIANT = "compliant"
    PENDING = "pending"
    NON_COMPLIANT = "non_compliant"


# Field name -> enum type, for validating patches.
VM_ENUM_FIELDS: dict[str, type[Enum]] = {
    "vm_location": VmLocation,
    "access_type": VmAccessType,
    "current_user_type": VmUserType,
    "purpose": VmPurpose,
    "cloud_provider": CloudProvider,
    "audit_status": VmAuditStatus,
}


@dataclass(frozen=True)
class VirtualMachineSpec:
    """Provisioning details supplied when a virtual machine is registered."""

    vm_number: str
    vm_location: VmLocation | None = None
    access_type: VmAccessType | None = None
    current_user_type: VmUserType | None = None
    purpose: VmPurpose | None = None
    project_name: str | None = None
    username: str | None = None
    ip_address: str | None = None
    ghost_ip: str | None = None
    vpn_required: bool = False
    mfa_enabled: bool = False
    cloud_provider: CloudProvider | None = None
    backup_enabled: bool = False
    audit_status: VmAuditStatus = VmAuditStatus.PENDING
    requested_by_id: UUID | None = None
    approved_by_id: UUID | None = None
    request_ticket_id: str | None = None
    approval_date: date | None = None
    expiry_date: date | None = None


VM_FIELDS: frozenset[str] = frozenset(VirtualMachineSpec.__dataclass_fields__)
