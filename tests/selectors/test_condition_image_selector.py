"""Tests for ConditionImageSelector."""

import pytest

from asset_kernel.exceptions import OutOfScopeError


@pytest.fixture
def issued(ledger, registry, make_asset, make_vm, admin_scope, people):
    """
    alice and bob each hold a laptop, carol holds a laptop and a software
    licence, and alice also holds a VM.
    """
    licences = registry.create_category(admin_scope, "Software Subscription")
    entries = {}
    for key, tag, employee in (
        ("alice", "LAP-200", people.alice),
        ("bob", "LAP-201", people.bob),
        ("carol", "LAP-202", people.carol),
    ):
        asset = make_asset(tag)
        (entries[key],) = ledger.assign(admin_scope, asset.id, [employee])
    licence = make_asset("SW-200", category_id=licences.id)
    ledger.assign(admin_scope, licence.id, [people.carol])
    vm = make_vm("VM-200", "VM-0200")
    ledger.assign(admin_scope, vm.id, [people.alice])
    return entries


class TestImagesDue:

    def test_only_hardware_is_due(self, condition_images, hr_scope, issued):
        due = condition_images.images_due(hr_scope)
        assert [d.asset_tag for d in due] == ["LAP-200", "LAP-201", "LAP-202"]
        assert all((d.upload_year, d.upload_quarter) == (2024, 1) for d in due)
        assert all(d.images_uploaded == 0 and d.max_images_allowed == 5 for d in due)

    def test_recorded_entries_drop_out(
        self, condition_images, ledger, hr_scope, alice_scope, issued
    ):
        ledger.record_condition_image(alice_scope, issued["alice"].id, "https://f/a.jpg", "a.jpg")

        missing = condition_images.images_due(hr_scope)
        assert [d.asset_tag for d in missing] == ["LAP-201", "LAP-202"]

        everything = {
            d.asset_tag: d.images_uploaded
            for d in condition_images.images_due(hr_scope, missing_only=False)
        }
        assert everything == {"LAP-200": 1, "LAP-201": 0, "LAP-202": 0}

    def test_due_again_next_quarter(
        self, condition_images, ledger, hr_scope, alice_scope, issued, clock
    ):
        ledger.record_condition_image(alice_scope, issued["alice"].id, "https://f/a.jpg", "a.jpg")
        clock.advance_days(91)

        due = condition_images.images_due(hr_scope)
        assert "LAP-200" in [d.asset_tag for d in due]
        assert {(d.upload_year, d.upload_quarter) for d in due} == {(2024, 2)}

    def test_returned_and_archived_are_not_due(
        self, condition_images, ledger, registry, admin_scope, hr_scope, issued
    ):
        ledger.unassign_user(admin_scope, issued["bob"].id)
        registry.archive_asset(admin_scope, issued["carol"].asset_id)

        assert [d.asset_tag for d in condition_images.images_due(hr_scope)] == ["LAP-200"]

    def test_team_scope(self, condition_images, manager_scope, carol_scope, issued, people):
        team = {d.employee_id for d in condition_images.images_due(manager_scope)}
        assert team == {people.alice, people.bob}

        (own,) = condition_images.images_due(carol_scope)
        assert own.employee_id == people.carol

    def test_employee_filter(self, condition_images, hr_scope, issued, people):
        (only,) = condition_images.images_due(hr_scope, employee_id=people.bob)
        assert only.asset_tag == "LAP-201"
        assert only.employee_name == "Bob Brown"

    def test_employee_filter_outside_scope(self, condition_images, carol_scope, issued, people):
        with pytest.raises(OutOfScopeError):
            condition_images.images_due(carol_scope, employee_id=people.alice)


class TestListConditionImages:

    def test_newest_first(self, condition_images, ledger, alice_scope, issued, clock):
        entry_id = issued["alice"].id
        ledger.record_condition_image(alice_scope, entry_id, "https://f/front.jpg", "front.jpg")
        clock.advance(60)
        ledger.record_condition_image(alice_scope, entry_id, "https://f/back.jpg", "back.jpg")

        listed = condition_images.list_condition_images(alice_scope, entry_id)
        assert [i.image_filename for i in listed] == ["back.jpg", "front.jpg"]

    def test_manager_sees_team_images(self, condition_images, ledger, alice_scope, manager_scope, issued):
        ledger.record_condition_image(alice_scope, issued["alice"].id, "https://f/a.jpg", "a.jpg")
        (image,) = condition_images.list_condition_images(manager_scope, issued["alice"].id)
        assert image.image_url == "https://f/a.jpg"

    def test_outside_scope(self, condition_images, carol_scope, issued):
        with pytest.raises(OutOfScopeError):
            condition_images.list_condition_images(carol_scope, issued["alice"].id)
