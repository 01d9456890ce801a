"""
Input intents for the registry and the ledger.

Asset creation takes a tagged variant: ``RegularAssetIntent`` or
``VirtualMachineIntent``.  The variant is chosen once, where the request
enters the kernel, and the registry dispatches on its type.  Everything
that differs between regular assets and virtual machines hangs off that one
decision.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, TypeVar, Union
from uuid import UUID

from asset_kernel.domain.lifecycle import (
    AssetCondition,
    AssetStatus,
    AssignmentType,
    CategoryKind,
)
from asset_kernel.domain.virtual_machine import VirtualMachineSpec
from asset_kernel.exceptions import InvalidFieldValueError

E = TypeVar("E", bound=Enum)


def coerce_enum(enum_cls: type[E], field_name: str, value: Any) -> E:
    """Parse ``value`` into ``enum_cls`` or raise InvalidFieldValueError."""
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise InvalidFieldValueError(
            field_name, value, f"expected one of: {allowed}"
        ) from None


def reject_unknown_fields(changes: Mapping[str, Any], allowed: Iterable[str]) -> None:
    unknown = sorted(set(changes) - set(allowed))
    if unknown:
        raise InvalidFieldValueError(unknown[0], changes[unknown[0]], "field cannot be changed")


@dataclass(frozen=True)
class AssetFields:
    """Attributes common to every asset."""

    asset_tag: str
    name: str
    category_id: UUID
    condition: AssetCondition = AssetCondition.GOOD
    status: AssetStatus | None = None  # None: let the lifecycle rules decide
    brand: str | None = None
    model: str | None = None
    serial_number: str | None = None
    location: str | None = None
    purchase_date: date | None = None
    warranty_expiry: date | None = None
    insurance_warranty_extended: date | None = None
    previous_audit_date: date | None = None
    hardware_image_date: date | None = None
    invoice_copy_link: str | None = None
    warranty_document_link: str | None = None
    notes: str | None = None


# Fields update_asset accepts.
ASSET_PATCH_FIELDS: frozenset[str] = frozenset(AssetFields.__dataclass_fields__)


@dataclass(frozen=True)
class RegularAssetIntent:
    fields: AssetFields

    kind = CategoryKind.REGULAR


@dataclass(frozen=True)
class VirtualMachineIntent:
    fields: AssetFields
    vm: VirtualMachineSpec

    kind = CategoryKind.VIRTUAL_MACHINE


AssetCreationIntent = Union[RegularAssetIntent, VirtualMachineIntent]


@dataclass(frozen=True)
class AssignmentDetails:
    """Terms applied to every entry created by one assign call."""

    assignment_type: AssignmentType = AssignmentType.PERMANENT
    expiry_date: date | None = None
    condition_at_issuance: AssetCondition | None = None
    issuance_condition_notes: str | None = None
    notes: str | None = None


# Fields update_assignment accepts.
ASSIGNMENT_PATCH_FIELDS: frozenset[str] = frozenset({
    "asset_id",
    "employee_id",
    "assignment_type",
    "expiry_date",
    "condition_at_issuance",
    "issuance_condition_notes",
    "notes",
})
