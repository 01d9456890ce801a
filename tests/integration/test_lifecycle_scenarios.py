"""
End-to-end lifecycle scenarios across registry, ledger and workflows.

Each test drives the public services the way the console does and checks
the derived asset status against the ledger after every step.
"""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import func, select

from asset_kernel.domain.intents import AssignmentDetails
from asset_kernel.domain.lifecycle import AssetCondition, AssetStatus, AssignmentType
from asset_kernel.domain.workflow import ComplaintStatus, RequestStatus
from asset_kernel.exceptions import ConflictError
from asset_kernel.models.assignment import AssetAssignment


def _active_entries(session, asset_id) -> int:
    return session.execute(
        select(func.count(AssetAssignment.id)).where(
            AssetAssignment.asset_id == asset_id,
            AssetAssignment.is_active == True,  # noqa: E712
        )
    ).scalar_one()


class TestSharedAssetReturn:
    """An asset shared by two employees stays assigned until both return it."""

    def test_returned_one_at_a_time(
        self, session, ledger, asset_selector, make_asset, admin_scope, people
    ):
        asset = make_asset("LAP-001", condition="good", status="available")
        assert asset.status == AssetStatus.AVAILABLE

        first, second = ledger.assign(
            admin_scope,
            asset.id,
            [people.alice, people.bob],
            AssignmentDetails(assignment_type=AssignmentType.PERMANENT),
        )
        assert asset_selector.get_asset(admin_scope, asset.id).status == AssetStatus.ASSIGNED
        assert _active_entries(session, asset.id) == 2

        ledger.unassign_user(admin_scope, first.id)
        assert asset_selector.get_asset(admin_scope, asset.id).status == AssetStatus.ASSIGNED
        assert _active_entries(session, asset.id) == 1

        ledger.unassign_user(admin_scope, second.id)
        assert asset_selector.get_asset(admin_scope, asset.id).status == AssetStatus.AVAILABLE
        assert _active_entries(session, asset.id) == 0

    def test_second_unassign_is_a_no_op(
        self, session, ledger, history, make_asset, admin_scope, hr_scope, people
    ):
        asset = make_asset("LAP-002")
        (entry,) = ledger.assign(admin_scope, asset.id, [people.alice])

        first = ledger.unassign_user(admin_scope, entry.id, "fair")
        again = ledger.unassign_user(admin_scope, entry.id, "poor")

        assert first == again
        assert again.return_condition == AssetCondition.FAIR
        assert len(history.employee_history(hr_scope, people.alice)) == 2


class TestRequestToAssignment:
    """An employee's request is approved and fulfilled with a specific asset."""

    def test_request_fulfilled_with_asset(
        self,
        requests_service,
        assignment_selector,
        make_asset,
        laptop_category,
        scope_for,
        admin_scope,
        people,
    ):
        asset = make_asset("LAP-001")
        carol_scope = scope_for(people.carol, "employee")

        request = requests_service.create_request(
            carol_scope, people.carol, laptop_category.id, "Laptop for field work", priority="high"
        )
        requests_service.approve(admin_scope, request.id)
        fulfilled = requests_service.fulfill(admin_scope, request.id, asset.id)

        assert fulfilled.status == RequestStatus.FULFILLED
        assert fulfilled.fulfilled_asset_id == asset.id
        (held,) = assignment_selector.list_employee_assets(carol_scope, people.carol)
        assert held.asset_id == asset.id

    def test_rejected_request_cannot_be_approved(
        self, requests_service, laptop_category, alice_scope, admin_scope, people
    ):
        request = requests_service.create_request(
            alice_scope, people.alice, laptop_category.id, "Second monitor"
        )
        requests_service.reject(admin_scope, request.id, "Out of stock")
        with pytest.raises(ConflictError):
            requests_service.approve(admin_scope, request.id)


class TestComplaintAndRetirement:
    """A damaged asset is reported, taken back and archived."""

    def test_damaged_asset_archived_after_return(
        self,
        ledger,
        registry,
        complaints,
        asset_selector,
        make_asset,
        admin_scope,
        office_scope,
        alice_scope,
        people,
    ):
        asset = make_asset("LAP-003")
        (entry,) = ledger.assign(admin_scope, asset.id, [people.alice])
        complaint = complaints.file_complaint(alice_scope, entry.id, "Screen cracked")

        returned = ledger.unassign_asset(office_scope, asset.id, "damaged", "Screen cracked")
        assert returned == 1
        registry.update_asset(office_scope, asset.id, {"condition": "damaged"})
        complaints.close(office_scope, complaint.id, "Asset archived")

        info = asset_selector.get_asset(admin_scope, asset.id)
        assert info.status == AssetStatus.ARCHIVED
        assert info.condition == AssetCondition.DAMAGED
        assert complaints.change_priority(alice_scope, complaint.id, "low").status == (
            ComplaintStatus.CLOSED
        )


class TestExpirySweep:

    def test_overdue_loaner_returns_to_stock(
        self, ledger, asset_selector, make_asset, admin_scope, people, clock
    ):
        asset = make_asset("LAP-004")
        ledger.assign(
            admin_scope,
            asset.id,
            [people.bob],
            AssignmentDetails(
                assignment_type=AssignmentType.TEMPORARY,
                expiry_date=clock.today() + timedelta(days=7),
            ),
        )
        assert ledger.expire_overdue(admin_scope) == []

        clock.advance_days(8)
        (expired,) = ledger.expire_overdue(admin_scope)

        assert not expired.is_active
        assert asset_selector.get_asset(admin_scope, asset.id).status == AssetStatus.AVAILABLE
