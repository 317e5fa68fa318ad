"""Tests for the role hierarchy and the authorization guard."""

import pytest
from shared.authorization import DEFAULT_ROLE_RANKS, ActingUser, AuthorizationGuard, RoleHierarchy
from shared.errors import Forbidden


@pytest.fixture()
def hierarchy():
    return RoleHierarchy(DEFAULT_ROLE_RANKS)


@pytest.fixture()
def guard(hierarchy):
    return AuthorizationGuard(hierarchy)


def _actor(*roles):
    return ActingUser(id="actor-1", roles=frozenset(roles))


class TestRoleHierarchy:
    def test_unknown_role_ranks_zero(self, hierarchy):
        assert hierarchy.rank("janitor") == 0
        assert not hierarchy.is_known("janitor")

    def test_effective_rank_is_the_highest_held(self, hierarchy):
        assert hierarchy.effective_rank(["picker", "coordinator", "guest"]) == 4

    def test_effective_rank_of_nothing_is_zero(self, hierarchy):
        assert hierarchy.effective_rank([]) == 0
        assert hierarchy.effective_rank(["janitor"]) == 0

    def test_ranks_are_immutable(self, hierarchy):
        with pytest.raises(TypeError):
            hierarchy._ranks["picker"] = 9

    def test_non_positive_rank_is_rejected(self):
        with pytest.raises(ValueError):
            RoleHierarchy({"ghost": 0})

    def test_superadmin_outranks_everyone(self, hierarchy):
        assert all(
            hierarchy.rank("superadmin") > hierarchy.rank(name) for name in hierarchy.role_names if name != "superadmin"
        )


class TestCanAssign:
    def test_peer_rank_may_be_granted(self, guard):
        assert guard.can_assign(_actor("admin"), "finance")
        assert guard.can_assign(_actor("coordinator"), "coordinator")

    def test_higher_rank_may_not_be_granted(self, guard):
        assert not guard.can_assign(_actor("admin"), "coordinator")
        assert not guard.can_assign(_actor("coordinator"), "superadmin")

    def test_unknown_role_is_never_grantable(self, guard):
        assert not guard.can_assign(_actor("superadmin"), "janitor")

    def test_actor_without_roles_grants_nothing(self, guard):
        assert not guard.can_assign(_actor(), "guest")


class TestCanManageUser:
    def test_strictly_higher_rank_required(self, guard):
        assert guard.can_manage_user(_actor("coordinator"), ["admin"])
        assert not guard.can_manage_user(_actor("admin"), ["finance"])
        assert not guard.can_manage_user(_actor("admin"), ["coordinator"])

    def test_target_without_roles_is_manageable(self, guard):
        assert guard.can_manage_user(_actor("guest"), [])

    def test_assign_and_manage_differ_at_equal_rank(self, guard):
        actor = _actor("admin")
        assert guard.can_assign(actor, "finance")
        assert not guard.can_manage_user(actor, ["finance"])

    def test_multi_role_actor_uses_highest_rank(self, guard):
        assert guard.can_manage_user(_actor("picker", "coordinator"), ["admin"])


class TestProfileEdit:
    def test_peers_may_edit_each_other(self, guard):
        assert guard.can_edit_profile(_actor("admin"), ["finance"])

    def test_lower_rank_may_not_edit_higher(self, guard):
        assert not guard.can_edit_profile(_actor("picker"), ["admin"])


class TestRaisingVariants:
    def test_require_assign_raises_forbidden(self, guard):
        with pytest.raises(Forbidden):
            guard.require_assign(_actor("picker"), "admin")

    def test_require_manage_user_raises_forbidden(self, guard):
        with pytest.raises(Forbidden):
            guard.require_manage_user(_actor("admin"), ["admin"])

    def test_require_rank_passes_for_higher_rank(self, guard):
        guard.require_rank(_actor("superadmin"), "coordinator")

    def test_require_rank_raises_for_lower_rank(self, guard):
        with pytest.raises(Forbidden):
            guard.require_rank(_actor("admin"), "coordinator")


class TestActingUser:
    def test_roles_round_trip_through_command_fields(self):
        actor = _actor("picker", "qc-online")

        class _Command:
            actor_id = actor.id
            actor_roles = actor.roles_json()

        assert ActingUser.from_command(_Command) == actor

    def test_missing_roles_mean_no_roles(self):
        class _Command:
            actor_id = "actor-2"
            actor_roles = None

        assert ActingUser.from_command(_Command).roles == frozenset()
