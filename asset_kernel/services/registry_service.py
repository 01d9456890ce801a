"""
asset_kernel.services.registry_service -- The asset registry.

Responsibility:
    Creates and edits assets (regular and virtual machine), manages
    categories, and performs the explicit status moves (archive, restore,
    maintenance, retire, lost).

Architecture position:
    Kernel > Services.  May import from domain/, models/, selectors/, db/.

Invariants enforced:
    - Asset tags are unique after normalization (stripped, upper-cased).
    - Category names are unique case-insensitively; a leading
      "Others - " (typed in the inline "new category" path) is dropped.
    - The creation intent's variant must match the category kind.
    - ``condition == damaged`` forces ``archived`` unless the same call
      supplies a status.
    - ``assigned`` is never accepted as a stored status from the registry;
      ``available``/``assigned`` hand the status back to the ledger.
    - Assets are never deleted.

Failure modes:
    - MissingFieldError / InvalidFieldValueError / CategoryKindMismatchError.
    - DuplicateAssetTagError / DuplicateVmNumberError.
    - CategoryNotFoundError / AssetNotFoundError.
    - InvalidStatusTransitionError on an illegal explicit move.
    - MissingCapabilityError / OutOfScopeError from the access scope.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import asdict
from typing import Any
from uuid import UUID

from sqlalchemy import select

from asset_kernel.domain.access import AccessScope
from asset_kernel.domain.dtos import AssetInfo, CategoryInfo
from asset_kernel.domain.intents import (
    ASSET_PATCH_FIELDS,
    AssetCreationIntent,
    AssetFields,
    RegularAssetIntent,
    VirtualMachineIntent,
    coerce_enum,
    reject_unknown_fields,
)
from asset_kernel.domain.lifecycle import (
    LEDGER_DRIVEN_STATUSES,
    STICKY_STATUSES,
    AssetCondition,
    AssetStatus,
    CategoryKind,
    apply_damage_rule,
    is_valid_explicit_transition,
    ledger_status,
)
from asset_kernel.domain.virtual_machine import (
    VM_ENUM_FIELDS,
    VM_FIELDS,
    VirtualMachineSpec,
)
from asset_kernel.exceptions import (
    AssetNotFoundError,
    CategoryKindMismatchError,
    CategoryNotFoundError,
    DuplicateAssetTagError,
    DuplicateVmNumberError,
    InvalidFieldValueError,
    InvalidStatusTransitionError,
    MissingFieldError,
)
from asset_kernel.logging_config import get_logger
from asset_kernel.models.asset import Asset, AssetCategory, VirtualMachineDetails
from asset_kernel.selectors.assignment_selector import count_active_assignments
from asset_kernel.selectors.mapping import asset_to_info, category_to_info
from asset_kernel.services.base import BaseService

logger = get_logger("services.registry")

_OTHERS_PREFIX = "others -"


def normalize_tag(tag: str | None) -> str:
    return (tag or "").strip().upper()


def normalize_category_name(name: str | None) -> str:
    """Strip whitespace and the inline "Others - " prefix."""
    cleaned = (name or "").strip()
    if cleaned.casefold().startswith(_OTHERS_PREFIX):
        cleaned = cleaned[len(_OTHERS_PREFIX):].strip()
    return cleaned


class RegistryService(BaseService[Asset]):
    """
    Write side of the asset registry.

    Every mutation needs full visibility plus ``manage_assets`` (regular
    assets) or ``manage_virtual_machines`` (virtual machines).
    """

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _get_asset(self, asset_id: UUID) -> Asset:
        asset = self.session.get(Asset, asset_id)
        if asset is None:
            raise AssetNotFoundError(str(asset_id))
        return asset

    def _get_category(self, category_id: UUID | None) -> AssetCategory:
        if category_id is None:
            raise MissingFieldError("category_id")
        category = self.session.get(AssetCategory, category_id)
        if category is None:
            raise CategoryNotFoundError(str(category_id))
        return category

    def _find_category(self, name: str) -> AssetCategory | None:
        stmt = select(AssetCategory).where(AssetCategory.name_key == name.casefold())
        return self.session.execute(stmt).scalar_one_or_none()

    def _to_dto(self, asset: Asset) -> AssetInfo:
        return asset_to_info(asset, count_active_assignments(self.session, asset.id))

    def _check_tag_free(self, tag: str, exclude_id: UUID | None = None) -> None:
        stmt = select(Asset.id).where(Asset.asset_tag == tag)
        if exclude_id is not None:
            stmt = stmt.where(Asset.id != exclude_id)
        if self.session.execute(stmt).first() is not None:
            raise DuplicateAssetTagError(tag)

    def _check_vm_number_free(self, vm_number: str, exclude_id: UUID | None = None) -> None:
        stmt = select(VirtualMachineDetails.id).where(VirtualMachineDetails.vm_number == vm_number)
        if exclude_id is not None:
            stmt = stmt.where(VirtualMachineDetails.id != exclude_id)
        if self.session.execute(stmt).first() is not None:
            raise DuplicateVmNumberError(vm_number)

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def create_category(
        self,
        scope: AccessScope,
        name: str,
        description: str | None = None,
        kind: CategoryKind | str = CategoryKind.REGULAR,
    ) -> CategoryInfo:
        """
        Create a category, or return the existing one with the same name.

        Matching is case-insensitive after dropping a leading "Others - ".
        """
        kind = coerce_enum(CategoryKind, "kind", kind)
        scope.require_asset_management(virtual_machine=kind == CategoryKind.VIRTUAL_MACHINE)
        return category_to_info(self._ensure_category(name, description, kind, scope.principal_id))

    def _ensure_category(
        self,
        name: str,
        description: str | None,
        kind: CategoryKind,
        actor_id: UUID,
    ) -> AssetCategory:
        cleaned = normalize_category_name(name)
        if not cleaned:
            raise MissingFieldError("name", "asset_category")

        existing = self._find_category(cleaned)
        if existing is not None:
            return existing

        category = AssetCategory(
            name=cleaned,
            name_key=cleaned.casefold(),
            description=description,
            kind=kind.value,
            created_by_id=actor_id,
        )
        self.session.add(category)
        self.session.flush()
        logger.info(
            "category_created",
            extra={"category_id": str(category.id), "category_name": cleaned, "kind": kind.value},
        )
        return category

    def seed_categories(
        self,
        actor_id: UUID,
        seeds: Iterable[tuple[str, CategoryKind | str, str | None]],
    ) -> list[CategoryInfo]:
        """Load a seed list of (name, kind, description) idempotently."""
        return [
            category_to_info(
                self._ensure_category(
                    name,
                    description,
                    coerce_enum(CategoryKind, "kind", kind),
                    actor_id,
                )
            )
            for name, kind, description in seeds
        ]

    # ------------------------------------------------------------------
    # Assets
    # ------------------------------------------------------------------

    def create_asset(self, scope: AccessScope, intent: AssetCreationIntent) -> AssetInfo:
        """
        Register a new asset from a regular or virtual-machine intent.

        The status defaults to ``available``; a damaged asset without an
        explicit status is archived.
        """
        if not isinstance(intent, (RegularAssetIntent, VirtualMachineIntent)):
            raise InvalidFieldValueError("intent", type(intent).__name__, "unknown asset intent")

        is_vm = isinstance(intent, VirtualMachineIntent)
        scope.require_asset_management(virtual_machine=is_vm)
        fields = intent.fields

        tag = normalize_tag(fields.asset_tag)
        if not tag:
            raise MissingFieldError("asset_tag")
        name = (fields.name or "").strip()
        if not name:
            raise MissingFieldError("name")

        category = self._get_category(fields.category_id)
        if CategoryKind(category.kind) != intent.kind:
            raise CategoryKindMismatchError(str(category.id), category.kind, intent.kind.value)

        condition = coerce_enum(AssetCondition, "condition", fields.condition)
        explicit = fields.status is not None
        status = coerce_enum(AssetStatus, "status", fields.status) if explicit else AssetStatus.AVAILABLE
        if status == AssetStatus.ASSIGNED:
            raise InvalidFieldValueError("status", status.value, "assets are assigned through the ledger")
        status = apply_damage_rule(condition, status, explicit)

        self._check_tag_free(tag)
        vm_spec = intent.vm if is_vm else None
        if vm_spec is not None:
            self._validate_vm_spec(vm_spec)

        values = asdict(fields)
        values.update(
            asset_tag=tag,
            name=name,
            condition=condition.value,
            status=status.value,
        )
        asset = Asset(**values, created_by_id=scope.principal_id)
        asset.category = category
        self.session.add(asset)

        if vm_spec is not None:
            asset.virtual_machine = self._build_vm(vm_spec, scope.principal_id)

        self.session.flush()

        logger.info(
            "asset_created",
            extra={
                "asset_id": str(asset.id),
                "asset_tag": tag,
                "category": category.name,
                "status": status.value,
                "virtual_machine": is_vm,
            },
        )
        return self._to_dto(asset)

    def update_asset(
        self,
        scope: AccessScope,
        asset_id: UUID,
        changes: Mapping[str, Any],
    ) -> AssetInfo:
        """
        Apply a partial update.

        A ``status`` key is an explicit choice and wins over the damage rule.
        ``available``/``assigned`` release the status to the ledger, which
        derives it from the active entries.  Without a ``status`` key, a
        resulting condition of ``damaged`` archives the asset.
        """
        reject_unknown_fields(changes, ASSET_PATCH_FIELDS)
        asset = self._get_asset(asset_id)
        scope.require_asset_management(virtual_machine=asset.is_virtual_machine)

        values = dict(changes)

        if "category_id" in values:
            category = self._get_category(values.pop("category_id"))
            scope.require_asset_management(
                virtual_machine=category.kind == CategoryKind.VIRTUAL_MACHINE
            )
        else:
            category = asset.category

        if "asset_tag" in values:
            tag = normalize_tag(values["asset_tag"])
            if not tag:
                raise MissingFieldError("asset_tag")
            self._check_tag_free(tag, exclude_id=asset.id)
            values["asset_tag"] = tag
        if "name" in values:
            name = (values["name"] or "").strip()
            if not name:
                raise MissingFieldError("name")
            values["name"] = name

        condition = coerce_enum(
            AssetCondition, "condition", values.pop("condition", asset.condition)
        )
        current = AssetStatus(asset.status)
        explicit = "status" in values and values["status"] is not None
        if explicit:
            requested = coerce_enum(AssetStatus, "status", values.pop("status"))
            if not is_valid_explicit_transition(current, requested):
                raise InvalidStatusTransitionError(str(asset.id), current.value, requested.value)
        else:
            values.pop("status", None)
            requested = current

        status = apply_damage_rule(condition, requested, explicit)
        if status in LEDGER_DRIVEN_STATUSES:
            status = ledger_status(count_active_assignments(self.session, asset.id))

        for key, value in values.items():
            setattr(asset, key, value)
        asset.category = category
        asset.condition = condition.value
        asset.status = status.value
        asset.updated_by_id = scope.principal_id
        self.session.flush()

        logger.info(
            "asset_updated",
            extra={
                "asset_id": str(asset.id),
                "fields": sorted(changes),
                "from_status": current.value,
                "to_status": status.value,
            },
        )
        return self._to_dto(asset)

    def update_virtual_machine(
        self,
        scope: AccessScope,
        asset_id: UUID,
        changes: Mapping[str, Any],
    ) -> AssetInfo:
        """Edit the provisioning details of a virtual machine."""
        reject_unknown_fields(changes, VM_FIELDS)
        asset = self._get_asset(asset_id)
        if not asset.is_virtual_machine:
            raise CategoryKindMismatchError(
                str(asset.category_id), asset.category.kind, CategoryKind.VIRTUAL_MACHINE.value
            )
        scope.require_asset_management(virtual_machine=True)

        vm = asset.virtual_machine
        if vm is None:
            if not changes.get("vm_number"):
                raise MissingFieldError("vm_number", "virtual_machine")
            self._check_vm_number_free(changes["vm_number"])
            vm = VirtualMachineDetails(vm_number=changes["vm_number"], created_by_id=scope.principal_id)
            asset.virtual_machine = vm

        for key, value in changes.items():
            if key == "vm_number":
                if not value:
                    raise MissingFieldError("vm_number", "virtual_machine")
                if vm.id is not None:
                    self._check_vm_number_free(value, exclude_id=vm.id)
            elif key in VM_ENUM_FIELDS and value is not None:
                value = coerce_enum(VM_ENUM_FIELDS[key], key, value).value
            setattr(vm, key, value)
        vm.updated_by_id = scope.principal_id
        self.session.flush()

        logger.info(
            "virtual_machine_updated",
            extra={"asset_id": str(asset.id), "fields": sorted(changes)},
        )
        return self._to_dto(asset)

    def _validate_vm_spec(self, spec: VirtualMachineSpec) -> None:
        if not (spec.vm_number or "").strip():
            raise MissingFieldError("vm_number", "virtual_machine")
        for key, enum_cls in VM_ENUM_FIELDS.items():
            value = getattr(spec, key)
            if value is not None:
                coerce_enum(enum_cls, key, value)
        self._check_vm_number_free(spec.vm_number.strip())

    def _build_vm(self, spec: VirtualMachineSpec, actor_id: UUID) -> VirtualMachineDetails:
        values = asdict(spec)
        values["vm_number"] = spec.vm_number.strip()
        for key, enum_cls in VM_ENUM_FIELDS.items():
            if values[key] is not None:
                values[key] = coerce_enum(enum_cls, key, values[key]).value
        return VirtualMachineDetails(**values, created_by_id=actor_id)

    # ------------------------------------------------------------------
    # Explicit status moves
    # ------------------------------------------------------------------

    def transition_status(
        self,
        scope: AccessScope,
        asset_id: UUID,
        target: AssetStatus | str,
        notes: str | None = None,
    ) -> AssetInfo:
        """
        Move an asset into a sticky status (maintenance, retired, lost, archived).

        Ledger-driven targets are a restore; see ``restore_asset``.
        """
        target = coerce_enum(AssetStatus, "status", target)
        if target in LEDGER_DRIVEN_STATUSES:
            return self.restore_asset(scope, asset_id)

        asset = self._get_asset(asset_id)
        scope.require_asset_management(virtual_machine=asset.is_virtual_machine)
        current = AssetStatus(asset.status)
        if not is_valid_explicit_transition(current, target):
            raise InvalidStatusTransitionError(str(asset.id), current.value, target.value)

        asset.status = target.value
        if notes:
            asset.notes = notes if not asset.notes else f"{asset.notes}\n{notes}"
        asset.updated_by_id = scope.principal_id
        self.session.flush()

        logger.info(
            "asset_status_changed",
            extra={
                "asset_id": str(asset.id),
                "from_status": current.value,
                "to_status": target.value,
            },
        )
        return self._to_dto(asset)

    def archive_asset(self, scope: AccessScope, asset_id: UUID, notes: str | None = None) -> AssetInfo:
        """Archive an asset.  Archiving twice is a conflict."""
        return self.transition_status(scope, asset_id, AssetStatus.ARCHIVED, notes)

    def restore_asset(self, scope: AccessScope, asset_id: UUID) -> AssetInfo:
        """
        Bring an asset back from a sticky status.

        The result is ``assigned`` if active entries exist, else ``available``.
        """
        asset = self._get_asset(asset_id)
        scope.require_asset_management(virtual_machine=asset.is_virtual_machine)
        current = AssetStatus(asset.status)
        if current not in STICKY_STATUSES:
            raise InvalidStatusTransitionError(str(asset.id), current.value, "restored")

        restored = ledger_status(count_active_assignments(self.session, asset.id))
        asset.status = restored.value
        asset.updated_by_id = scope.principal_id
        self.session.flush()

        logger.info(
            "asset_restored",
            extra={
                "asset_id": str(asset.id),
                "from_status": current.value,
                "to_status": restored.value,
            },
        )
        return self._to_dto(asset)
