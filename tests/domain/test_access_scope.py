"""Tests for AccessScope and the role-driven capability resolver."""

from uuid import uuid4

import pytest

from asset_kernel.domain.access import (
    ALL_CAPABILITIES,
    AccessScope,
    Capability,
    Principal,
    RoleCapabilityResolver,
)
from asset_kernel.exceptions import MissingCapabilityError, OutOfScopeError


def _team_scope(principal_id, *members, capabilities=frozenset()):
    return AccessScope(
        principal_id=principal_id,
        full_visibility=False,
        team_filter=frozenset({principal_id, *members}),
        capabilities=capabilities,
    )


class TestAccessScope:

    def test_full_visibility_requires_no_filter(self):
        with pytest.raises(ValueError):
            AccessScope(uuid4(), full_visibility=True, team_filter=frozenset())

    def test_team_scope_requires_filter(self):
        with pytest.raises(ValueError):
            AccessScope(uuid4(), full_visibility=False, team_filter=None)

    def test_system_scope_sees_everything(self):
        scope = AccessScope.system(uuid4())
        assert scope.full_visibility
        assert scope.can_see(uuid4())
        assert scope.capabilities == ALL_CAPABILITIES

    def test_team_scope_sees_members_only(self):
        me, report, stranger = uuid4(), uuid4(), uuid4()
        scope = _team_scope(me, report)
        assert scope.can_see(me)
        assert scope.can_see(report)
        assert not scope.can_see(stranger)
        with pytest.raises(OutOfScopeError):
            scope.require_visible(stranger)

    def test_require_missing_capability(self):
        scope = _team_scope(uuid4())
        with pytest.raises(MissingCapabilityError) as exc_info:
            scope.require(Capability.MANAGE_ASSETS)
        assert exc_info.value.capability == "manage_assets"
        assert exc_info.value.http_status == 403

    def test_self_or_full(self):
        me, report = uuid4(), uuid4()
        scope = _team_scope(me, report)
        scope.require_self_or_full(me, "test")
        with pytest.raises(OutOfScopeError):
            scope.require_self_or_full(report, "test")

    def test_asset_management_needs_full_visibility(self):
        me = uuid4()
        scope = _team_scope(me, capabilities=frozenset({Capability.MANAGE_ASSETS}))
        with pytest.raises(OutOfScopeError):
            scope.require_asset_management(virtual_machine=False)

    def test_vm_management_is_a_separate_capability(self):
        scope = AccessScope(
            uuid4(),
            full_visibility=True,
            team_filter=None,
            capabilities=frozenset({Capability.MANAGE_ASSETS}),
        )
        scope.require_asset_management(virtual_machine=False)
        with pytest.raises(MissingCapabilityError):
            scope.require_asset_management(virtual_machine=True)


class TestRoleCapabilityResolver:

    def test_union_of_roles(self):
        resolver = RoleCapabilityResolver({
            "a": ["view_all"],
            "b": [Capability.MANAGE_ASSETS],
        })
        caps = resolver.capabilities_for(Principal(uuid4(), frozenset({"a", "b"})))
        assert caps == frozenset({Capability.VIEW_ALL, Capability.MANAGE_ASSETS})

    def test_unknown_role_grants_nothing(self):
        resolver = RoleCapabilityResolver({"a": ["view_all"]})
        assert resolver.capabilities_for(Principal(uuid4(), frozenset({"z"}))) == frozenset()

    def test_unknown_capability_rejected(self):
        with pytest.raises(ValueError):
            RoleCapabilityResolver({"a": ["fly"]})

    def test_roles_sorted(self):
        assert RoleCapabilityResolver({"b": [], "a": []}).roles == ("a", "b")
