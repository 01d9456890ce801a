"""Selectors for the asset kernel (read side)."""

from asset_kernel.selectors.asset_selector import AssetSelector
from asset_kernel.selectors.assignment_selector import AssignmentSelector
from asset_kernel.selectors.condition_image_selector import ConditionImageSelector
from asset_kernel.selectors.history_selector import HistorySelector
from asset_kernel.selectors.workflow_selector import ComplaintSelector, RequestSelector

__all__ = [
    "AssetSelector",
    "AssignmentSelector",
    "ComplaintSelector",
    "ConditionImageSelector",
    "HistorySelector",
    "RequestSelector",
]
