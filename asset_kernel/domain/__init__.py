"""
Pure domain layer.

Value objects, enums, state machines and contracts with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O

Time comes in through the injected Clock.
"""

from asset_kernel.domain.access import (
    AccessScope,
    Capability,
    CapabilityResolver,
    Principal,
    RoleCapabilityResolver,
)
from asset_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from asset_kernel.domain.condition_images import (
    MAX_IMAGES_PER_QUARTER,
    Quarter,
    is_hardware_category,
)
from asset_kernel.domain.directory import (
    EmployeeDirectory,
    EmployeeRecord,
    InMemoryEmployeeDirectory,
)
from asset_kernel.domain.dtos import (
    AssetInfo,
    AssetMetrics,
    AssignmentInfo,
    AssignmentLogInfo,
    CategoryInfo,
    ComplaintInfo,
    ConditionImageInfo,
    ConditionImagesDue,
    EmployeeHistoryRollup,
    RequestInfo,
    VirtualMachineInfo,
    VmMetrics,
)
from asset_kernel.domain.intents import (
    AssetCreationIntent,
    AssetFields,
    AssignmentDetails,
    RegularAssetIntent,
    VirtualMachineIntent,
)
from asset_kernel.domain.lifecycle import (
    AssetCondition,
    AssetStatus,
    AssignmentType,
    CategoryKind,
    LogAction,
    LogEntryStatus,
)
from asset_kernel.domain.virtual_machine import VirtualMachineSpec
from asset_kernel.domain.workflow import ComplaintStatus, Priority, RequestStatus

__all__ = [
    "MAX_IMAGES_PER_QUARTER",
    "AccessScope",
    "AssetCondition",
    "AssetCreationIntent",
    "AssetFields",
    "AssetInfo",
    "AssetMetrics",
    "AssetStatus",
    "AssignmentDetails",
    "AssignmentInfo",
    "AssignmentLogInfo",
    "AssignmentType",
    "Capability",
    "CapabilityResolver",
    "CategoryInfo",
    "CategoryKind",
    "Clock",
    "ComplaintInfo",
    "ComplaintStatus",
    "ConditionImageInfo",
    "ConditionImagesDue",
    "DeterministicClock",
    "EmployeeDirectory",
    "EmployeeHistoryRollup",
    "EmployeeRecord",
    "InMemoryEmployeeDirectory",
    "LogAction",
    "LogEntryStatus",
    "Principal",
    "Priority",
    "Quarter",
    "RegularAssetIntent",
    "RequestInfo",
    "RequestStatus",
    "RoleCapabilityResolver",
    "SystemClock",
    "VirtualMachineInfo",
    "VirtualMachineIntent",
    "VirtualMachineSpec",
    "VmMetrics",
    "is_hardware_category",
]
