"""Tests for RequestSelector and ComplaintSelector."""

from uuid import uuid4

import pytest

from asset_kernel.domain.workflow import ComplaintStatus, RequestStatus
from asset_kernel.exceptions import ComplaintNotFoundError, OutOfScopeError, RequestNotFoundError


@pytest.fixture
def filed_requests(requests_service, scope_for, laptop_category, people, clock):
    """One request each from alice, bob and carol, a minute apart."""
    filed = []
    for employee_id in (people.alice, people.bob, people.carol):
        filed.append(
            requests_service.create_request(
                scope_for(employee_id, "employee"),
                employee_id,
                laptop_category.id,
                "Replacement laptop",
            )
        )
        clock.advance(60)
    return filed


class TestRequestSelector:

    def test_newest_first(self, request_selector, hr_scope, filed_requests):
        listed = request_selector.list_requests(hr_scope)
        assert [r.id for r in listed] == [r.id for r in reversed(filed_requests)]

    def test_manager_sees_team_requests(self, request_selector, manager_scope, filed_requests, people):
        requesters = {r.requester_id for r in request_selector.list_requests(manager_scope)}
        assert requesters == {people.alice, people.bob}

    def test_employee_sees_own(self, request_selector, alice_scope, filed_requests, people):
        (own,) = request_selector.list_requests(alice_scope)
        assert own.requester_id == people.alice

    def test_filter_by_status(
        self, request_selector, requests_service, manager_scope, hr_scope, filed_requests
    ):
        requests_service.approve(manager_scope, filed_requests[0].id)
        approved = request_selector.list_requests(hr_scope, status=RequestStatus.APPROVED)
        assert [r.id for r in approved] == [filed_requests[0].id]
        assert len(request_selector.list_requests(hr_scope, status="pending")) == 2

    def test_get_outside_scope(self, request_selector, alice_scope, filed_requests):
        with pytest.raises(OutOfScopeError):
            request_selector.get_request(alice_scope, filed_requests[2].id)

    def test_get_unknown(self, request_selector, hr_scope):
        with pytest.raises(RequestNotFoundError):
            request_selector.get_request(hr_scope, uuid4())


class TestComplaintSelector:

    @pytest.fixture
    def filed_complaints(self, ledger, complaints, make_asset, admin_scope, scope_for, people):
        laptop = make_asset("LAP-1")
        alice_entry, carol_entry = ledger.assign(admin_scope, laptop.id, [people.alice, people.carol])
        return (
            complaints.file_complaint(scope_for(people.alice, "employee"), alice_entry.id, "Fan noise"),
            complaints.file_complaint(scope_for(people.carol, "employee"), carol_entry.id, "Cracked screen"),
        )

    def test_scoped_listing(self, complaint_selector, manager_scope, hr_scope, filed_complaints, people):
        assert len(complaint_selector.list_complaints(hr_scope)) == 2
        (visible,) = complaint_selector.list_complaints(manager_scope)
        assert visible.employee_id == people.alice

    def test_filter_by_asset_and_status(
        self, complaint_selector, complaints, office_scope, hr_scope, filed_complaints
    ):
        alice_complaint, _ = filed_complaints
        complaints.resolve(office_scope, alice_complaint.id, "Cleaned fan")
        resolved = complaint_selector.list_complaints(hr_scope, status=ComplaintStatus.RESOLVED)
        assert [c.id for c in resolved] == [alice_complaint.id]
        on_asset = complaint_selector.list_complaints(hr_scope, asset_id=alice_complaint.asset_id)
        assert len(on_asset) == 2

    def test_get_outside_scope(self, complaint_selector, carol_scope, filed_complaints):
        with pytest.raises(OutOfScopeError):
            complaint_selector.get_complaint(carol_scope, filed_complaints[0].id)

    def test_get_unknown(self, complaint_selector, hr_scope):
        with pytest.raises(ComplaintNotFoundError):
            complaint_selector.get_complaint(hr_scope, uuid4())
