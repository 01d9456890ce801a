"""ORM models for the asset kernel."""

from asset_kernel.models.asset import Asset, AssetCategory, VirtualMachineDetails
from asset_kernel.models.assignment import AssetAssignment, AssignmentLogEntry
from asset_kernel.models.complaint import AssetComplaint
from asset_kernel.models.condition_image import AssetConditionImage
from asset_kernel.models.request import AssetRequest
from asset_kernel.models.sequence import SequenceCounter


def import_all_models() -> list[type]:
    """Return every mapped class so Base.metadata knows all tables."""
    return [
        AssetCategory,
        Asset,
        VirtualMachineDetails,
        AssetAssignment,
        AssignmentLogEntry,
        AssetRequest,
        AssetComplaint,
        AssetConditionImage,
        SequenceCounter,
    ]


__all__ = [
    "Asset",
    "AssetAssignment",
    "AssetCategory",
    "AssetComplaint",
    "AssetConditionImage",
    "AssetRequest",
    "AssignmentLogEntry",
    "SequenceCounter",
    "VirtualMachineDetails",
    "import_all_models",
]
