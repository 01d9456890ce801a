"""
Tests for RegistryService.

Covers:
- Asset creation: validation, tag normalization, uniqueness, damaged rule
- Tagged creation intents against category kinds
- Partial updates, including status hand-back to the ledger
- Explicit status moves: archive, restore, maintenance, retire
- Idempotent category creation and seeding
- Capability checks per asset kind
"""

import logging
from uuid import uuid4

import pytest

from asset_kernel.domain.intents import AssetFields, RegularAssetIntent, VirtualMachineIntent
from asset_kernel.domain.lifecycle import AssetCondition, AssetStatus, CategoryKind
from asset_kernel.domain.virtual_machine import CloudProvider, VirtualMachineSpec, VmLocation
from asset_kernel.exceptions import (
    CategoryKindMismatchError,
    CategoryNotFoundError,
    DuplicateAssetTagError,
    DuplicateVmNumberError,
    InvalidFieldValueError,
    InvalidStatusTransitionError,
    MissingCapabilityError,
    MissingFieldError,
    OutOfScopeError,
)


class TestCreateAsset:

    def test_defaults_to_available(self, make_asset):
        asset = make_asset("LAP-001")
        assert asset.status == AssetStatus.AVAILABLE
        assert asset.condition == AssetCondition.GOOD
        assert asset.category_name == "Laptop"
        assert asset.active_assignment_count == 0
        assert asset.virtual_machine is None

    def test_tag_is_normalized(self, make_asset):
        asset = make_asset("  lap-002 ")
        assert asset.asset_tag == "LAP-002"

    def test_duplicate_tag_rejected_case_insensitively(self, make_asset):
        make_asset("LAP-001")
        with pytest.raises(DuplicateAssetTagError) as exc_info:
            make_asset("lap-001")
        assert exc_info.value.asset_tag == "LAP-001"
        assert exc_info.value.http_status == 409

    def test_blank_tag_rejected(self, make_asset):
        with pytest.raises(MissingFieldError) as exc_info:
            make_asset("   ")
        assert exc_info.value.field_name == "asset_tag"

    def test_blank_name_rejected(self, make_asset):
        with pytest.raises(MissingFieldError):
            make_asset("LAP-003", name=" ")

    def test_unknown_category(self, make_asset):
        with pytest.raises(CategoryNotFoundError):
            make_asset("LAP-004", category_id=uuid4())

    def test_damaged_is_archived(self, make_asset):
        asset = make_asset("LAP-005", condition=AssetCondition.DAMAGED)
        assert asset.status == AssetStatus.ARCHIVED

    def test_damaged_with_explicit_status(self, make_asset):
        asset = make_asset(
            "LAP-006",
            condition=AssetCondition.DAMAGED,
            status=AssetStatus.MAINTENANCE,
        )
        assert asset.status == AssetStatus.MAINTENANCE

    def test_assigned_cannot_be_set_directly(self, make_asset):
        with pytest.raises(InvalidFieldValueError) as exc_info:
            make_asset("LAP-007", status=AssetStatus.ASSIGNED)
        assert exc_info.value.field_name == "status"

    def test_unknown_condition_string(self, make_asset):
        with pytest.raises(InvalidFieldValueError):
            make_asset("LAP-008", condition="shiny")

    def test_optional_fields_round_trip(self, make_asset):
        asset = make_asset(
            "LAP-009",
            brand="Lenovo",
            model="T14",
            serial_number="SN-1",
            location="HQ",
            notes="Spare",
        )
        assert (asset.brand, asset.model, asset.serial_number) == ("Lenovo", "T14", "SN-1")
        assert asset.location == "HQ"
        assert asset.notes == "Spare"

    def test_logs_creation(self, make_asset, captured_logs):
        asset = make_asset("LAP-010")
        created = [r for r in captured_logs() if r["message"] == "asset_created"]
        assert created and created[0]["asset_id"] == str(asset.id)


class TestVirtualMachines:

    def test_create_vm(self, make_vm):
        vm = make_vm(
            "VM-001",
            "VM-0001",
            vm_location=VmLocation.INDIA,
            cloud_provider=CloudProvider.AWS,
            vpn_required=True,
        )
        assert vm.is_virtual_machine
        assert vm.category_kind == CategoryKind.VIRTUAL_MACHINE
        assert vm.virtual_machine.vm_number == "VM-0001"
        assert vm.virtual_machine.vm_location == VmLocation.INDIA
        assert vm.virtual_machine.cloud_provider == CloudProvider.AWS
        assert vm.virtual_machine.vpn_required is True

    def test_vm_intent_on_regular_category(self, registry, admin_scope, laptop_category):
        intent = VirtualMachineIntent(
            AssetFields(asset_tag="VM-002", name="VM", category_id=laptop_category.id),
            VirtualMachineSpec(vm_number="VM-0002"),
        )
        with pytest.raises(CategoryKindMismatchError):
            registry.create_asset(admin_scope, intent)

    def test_regular_intent_on_vm_category(self, registry, admin_scope, vm_category):
        intent = RegularAssetIntent(
            AssetFields(asset_tag="VM-003", name="VM", category_id=vm_category.id)
        )
        with pytest.raises(CategoryKindMismatchError):
            registry.create_asset(admin_scope, intent)

    def test_duplicate_vm_number(self, make_vm):
        make_vm("VM-004", "VM-0004")
        with pytest.raises(DuplicateVmNumberError):
            make_vm("VM-005", "VM-0004")

    def test_office_admin_cannot_manage_vms(self, make_vm, office_scope):
        with pytest.raises(MissingCapabilityError):
            make_vm("VM-006", "VM-0006", scope=office_scope)

    def test_helpdesk_manages_vms_only(self, make_vm, make_asset, it_scope):
        vm = make_vm("VM-007", "VM-0007", scope=it_scope)
        assert vm.is_virtual_machine
        with pytest.raises(MissingCapabilityError):
            make_asset("LAP-100", scope=it_scope)

    def test_update_vm_details(self, registry, make_vm, it_scope):
        vm = make_vm("VM-008", "VM-0008")
        updated = registry.update_virtual_machine(
            it_scope, vm.id, {"audit_status": "compliant", "project_name": "Apollo"}
        )
        assert updated.virtual_machine.audit_status.value == "compliant"
        assert updated.virtual_machine.project_name == "Apollo"

    def test_update_vm_rejects_unknown_field(self, registry, make_vm, admin_scope):
        vm = make_vm("VM-009", "VM-0009")
        with pytest.raises(InvalidFieldValueError):
            registry.update_virtual_machine(admin_scope, vm.id, {"password": "hunter2"})

    def test_update_vm_on_regular_asset(self, registry, make_asset, admin_scope):
        asset = make_asset("LAP-011")
        with pytest.raises(CategoryKindMismatchError):
            registry.update_virtual_machine(admin_scope, asset.id, {"project_name": "x"})

    def test_moving_vm_to_regular_category_hides_details(
        self, registry, make_vm, admin_scope, laptop_category
    ):
        vm = make_vm("VM-010", "VM-0010")
        moved = registry.update_asset(admin_scope, vm.id, {"category_id": laptop_category.id})
        assert not moved.is_virtual_machine
        assert moved.virtual_machine is None


class TestUpdateAsset:

    def test_partial_update(self, registry, make_asset, admin_scope):
        asset = make_asset("LAP-020")
        updated = registry.update_asset(admin_scope, asset.id, {"location": "Floor 2"})
        assert updated.location == "Floor 2"
        assert updated.name == asset.name

    def test_damaged_update_archives(self, registry, make_asset, admin_scope):
        asset = make_asset("LAP-021")
        updated = registry.update_asset(admin_scope, asset.id, {"condition": "damaged"})
        assert updated.status == AssetStatus.ARCHIVED

    def test_damaged_with_explicit_status(self, registry, make_asset, admin_scope):
        asset = make_asset("LAP-022")
        updated = registry.update_asset(
            admin_scope, asset.id, {"condition": "damaged", "status": "maintenance"}
        )
        assert updated.status == AssetStatus.MAINTENANCE

    def test_status_available_hands_back_to_ledger(
        self, registry, ledger, make_asset, admin_scope, people
    ):
        asset = make_asset("LAP-023")
        ledger.assign(admin_scope, asset.id, [people.alice])
        registry.transition_status(admin_scope, asset.id, AssetStatus.MAINTENANCE)

        updated = registry.update_asset(admin_scope, asset.id, {"status": "available"})
        assert updated.status == AssetStatus.ASSIGNED

    def test_tag_change_checks_uniqueness(self, registry, make_asset, admin_scope):
        make_asset("LAP-024")
        other = make_asset("LAP-025")
        with pytest.raises(DuplicateAssetTagError):
            registry.update_asset(admin_scope, other.id, {"asset_tag": "lap-024"})

    def test_keeping_own_tag_is_fine(self, registry, make_asset, admin_scope):
        asset = make_asset("LAP-026")
        updated = registry.update_asset(admin_scope, asset.id, {"asset_tag": "LAP-026"})
        assert updated.asset_tag == "LAP-026"

    def test_unknown_field(self, registry, make_asset, admin_scope):
        asset = make_asset("LAP-027")
        with pytest.raises(InvalidFieldValueError):
            registry.update_asset(admin_scope, asset.id, {"colour": "red"})

    def test_illegal_status_move(self, registry, make_asset, admin_scope):
        asset = make_asset("LAP-028")
        registry.transition_status(admin_scope, asset.id, AssetStatus.RETIRED)
        with pytest.raises(InvalidStatusTransitionError):
            registry.update_asset(admin_scope, asset.id, {"status": "maintenance"})

    def test_team_scope_cannot_edit(self, registry, make_asset, manager_scope):
        asset = make_asset("LAP-029")
        with pytest.raises(OutOfScopeError):
            registry.update_asset(manager_scope, asset.id, {"location": "x"})


class TestStatusMoves:

    def test_archive_then_restore_without_assignments(self, registry, make_asset, admin_scope):
        asset = make_asset("LAP-030")
        assert registry.archive_asset(admin_scope, asset.id).status == AssetStatus.ARCHIVED
        assert registry.restore_asset(admin_scope, asset.id).status == AssetStatus.AVAILABLE

    def test_restore_with_active_assignment(
        self, registry, ledger, make_asset, admin_scope, people
    ):
        asset = make_asset("LAP-031")
        ledger.assign(admin_scope, asset.id, [people.alice])
        registry.archive_asset(admin_scope, asset.id)
        assert registry.restore_asset(admin_scope, asset.id).status == AssetStatus.ASSIGNED

    def test_archive_twice(self, registry, make_asset, admin_scope):
        asset = make_asset("LAP-032")
        registry.archive_asset(admin_scope, asset.id)
        with pytest.raises(InvalidStatusTransitionError):
            registry.archive_asset(admin_scope, asset.id)

    def test_archive_twice_through_update(self, registry, make_asset, admin_scope):
        asset = make_asset("LAP-036")
        registry.update_asset(admin_scope, asset.id, {"status": "archived"})
        with pytest.raises(InvalidStatusTransitionError):
            registry.update_asset(admin_scope, asset.id, {"status": "archived"})
        with pytest.raises(InvalidStatusTransitionError):
            registry.archive_asset(admin_scope, asset.id)

    def test_restore_non_sticky(self, registry, make_asset, admin_scope):
        asset = make_asset("LAP-033")
        with pytest.raises(InvalidStatusTransitionError):
            registry.restore_asset(admin_scope, asset.id)

    def test_transition_to_available_is_restore(self, registry, make_asset, admin_scope):
        asset = make_asset("LAP-034")
        registry.transition_status(admin_scope, asset.id, "lost")
        assert registry.transition_status(admin_scope, asset.id, "available").status == (
            AssetStatus.AVAILABLE
        )

    def test_notes_are_appended(self, registry, make_asset, admin_scope):
        asset = make_asset("LAP-035", notes="Bought 2021")
        moved = registry.transition_status(
            admin_scope, asset.id, AssetStatus.MAINTENANCE, notes="Screen flicker"
        )
        assert moved.notes == "Bought 2021\nScreen flicker"


class TestCategories:

    def test_idempotent_case_insensitive(self, registry, admin_scope):
        first = registry.create_category(admin_scope, "Monitor")
        second = registry.create_category(admin_scope, "  monitor ")
        assert first.id == second.id
        assert second.name == "Monitor"

    def test_others_prefix_dropped(self, registry, admin_scope):
        category = registry.create_category(admin_scope, "Others - Projector")
        assert category.name == "Projector"
        assert registry.create_category(admin_scope, "projector").id == category.id

    def test_blank_name(self, registry, admin_scope):
        with pytest.raises(MissingFieldError):
            registry.create_category(admin_scope, "Others - ")

    def test_vm_category_needs_vm_capability(self, registry, office_scope):
        with pytest.raises(MissingCapabilityError):
            registry.create_category(office_scope, "Cloud VM", kind="virtual_machine")

    def test_seed_is_idempotent(self, registry, test_actor_id):
        seeds = [("Laptop", "regular", None), ("Virtual Machine", "virtual_machine", "VMs")]
        first = registry.seed_categories(test_actor_id, seeds)
        second = registry.seed_categories(test_actor_id, seeds)
        assert [c.id for c in first] == [c.id for c in second]
        assert first[1].kind == CategoryKind.VIRTUAL_MACHINE

    def test_creation_logged_at_info(self, registry, admin_scope, captured_logs):
        logging.getLogger("asset_kernel").setLevel(logging.INFO)
        category = registry.create_category(admin_scope, "Docking Station")

        (event,) = [r for r in captured_logs() if r["message"] == "category_created"]
        assert event["category_id"] == str(category.id)
        assert event["category_name"] == "Docking Station"
        assert event["logger"] == "asset_kernel.services.registry"
