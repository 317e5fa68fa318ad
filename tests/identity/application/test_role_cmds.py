"""Application tests for role seeding and role grants."""

import json

import pytest
from identity.role.role import Role
from identity.role.seeding import SeedRoles
from identity.user.provisioning import CreateUser
from identity.user.roles import AssignRole, RemoveRole
from identity.user.user import User
from protean import current_domain
from protean.exceptions import ObjectNotFoundError
from shared.authorization import DEFAULT_ROLE_RANKS
from shared.errors import Conflict, Forbidden, NotFound


def _actor(actor_id, *roles):
    return {"actor_id": actor_id, "actor_roles": json.dumps(list(roles))}


def _create_user(username="budi", role=None):
    return current_domain.process(
        CreateUser(
            username=username,
            email=f"{username}@example.com",
            password="s3cret!",
            role=role,
            **_actor("root", "superadmin"),
        ),
        asynchronous=False,
    )


def _user(user_id):
    return current_domain.repository_for(User).get(user_id)


class TestSeedRoles:
    def test_creates_every_ranked_role(self, seeded_roles):
        assert sorted(seeded_roles) == sorted(DEFAULT_ROLE_RANKS)
        assert current_domain.repository_for(Role).names() == set(DEFAULT_ROLE_RANKS)

    def test_reseeding_creates_nothing(self, seeded_roles):
        assert current_domain.process(SeedRoles(), asynchronous=False) == []


class TestAssignRole:
    def test_coordinator_grants_picker(self, seeded_roles):
        user_id = _create_user()
        current_domain.process(
            AssignRole(user_id=user_id, role_name="picker", **_actor("coord-1", "coordinator")),
            asynchronous=False,
        )
        assert _user(user_id).holds("picker")

    def test_peer_rank_can_be_granted(self, seeded_roles):
        user_id = _create_user()
        current_domain.process(
            AssignRole(user_id=user_id, role_name="finance", **_actor("admin-1", "admin")),
            asynchronous=False,
        )
        assert _user(user_id).holds("finance")

    def test_higher_rank_cannot_be_granted(self, seeded_roles):
        user_id = _create_user()
        with pytest.raises(Forbidden):
            current_domain.process(
                AssignRole(user_id=user_id, role_name="coordinator", **_actor("admin-1", "admin")),
                asynchronous=False,
            )
        assert not _user(user_id).holds("coordinator")

    def test_held_role_is_a_conflict(self, seeded_roles):
        user_id = _create_user(role="picker")
        with pytest.raises(Conflict):
            current_domain.process(
                AssignRole(user_id=user_id, role_name="picker", **_actor("coord-1", "coordinator")),
                asynchronous=False,
            )

    def test_unknown_role_is_not_found(self, seeded_roles):
        user_id = _create_user()
        with pytest.raises(NotFound):
            current_domain.process(
                AssignRole(user_id=user_id, role_name="janitor", **_actor("root", "superadmin")),
                asynchronous=False,
            )

    def test_unknown_user_is_not_found(self, seeded_roles):
        with pytest.raises(ObjectNotFoundError):
            current_domain.process(
                AssignRole(user_id="missing-user", role_name="picker", **_actor("root", "superadmin")),
                asynchronous=False,
            )


class TestRemoveRole:
    def test_coordinator_revokes_picker(self, seeded_roles):
        user_id = _create_user(role="picker")
        current_domain.process(
            RemoveRole(user_id=user_id, role_name="picker", **_actor("coord-1", "coordinator")),
            asynchronous=False,
        )
        assert not _user(user_id).holds("picker")

    def test_role_not_held_is_not_found(self, seeded_roles):
        user_id = _create_user()
        with pytest.raises(NotFound):
            current_domain.process(
                RemoveRole(user_id=user_id, role_name="picker", **_actor("coord-1", "coordinator")),
                asynchronous=False,
            )

    def test_lower_rank_cannot_revoke(self, seeded_roles):
        user_id = _create_user(role="admin")
        with pytest.raises(Forbidden):
            current_domain.process(
                RemoveRole(user_id=user_id, role_name="admin", **_actor("picker-1", "picker")),
                asynchronous=False,
            )
        assert _user(user_id).holds("admin")
