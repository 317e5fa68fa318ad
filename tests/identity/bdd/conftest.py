"""Shared BDD fixtures and step definitions for role grants."""

import pytest
from identity.domain import guard
from identity.user.events import RoleGranted, RoleRevoked
from identity.user.user import User
from pytest_bdd import given, parsers, then
from shared.authorization import ActingUser

_USER_EVENT_CLASSES = {
    "RoleGranted": RoleGranted,
    "RoleRevoked": RoleRevoked,
}


@pytest.fixture()
def error():
    """Container for captured domain errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('an acting user holding "{roles}"'), target_fixture="actor")
def acting_user(roles):
    return ActingUser(id="actor-bdd", roles=frozenset(role.strip() for role in roles.split(",")))


@given(parsers.cfparse('a user "{username}" holding "{role_name}"'), target_fixture="user")
def user_holding(username, role_name):
    user = User.register(username=username, email=f"{username}@example.com", password="s3cret!")
    user.grant(f"role-{role_name}", role_name, assigned_by="system")
    user._events.clear()
    return user


@given(parsers.cfparse('a user "{username}" without roles'), target_fixture="user")
def user_without_roles(username):
    user = User.register(username=username, email=f"{username}@example.com", password="s3cret!")
    user._events.clear()
    return user


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the user holds "{role_name}"'))
def user_holds(user, role_name):
    assert user.holds(role_name)


@then(parsers.cfparse('the user does not hold "{role_name}"'))
def user_does_not_hold(user, role_name):
    assert not user.holds(role_name)


@then(parsers.cfparse("the request fails with {error_kind}"))
def request_fails_with(error, error_kind):
    assert error["exc"] is not None, f"Expected {error_kind} but nothing was raised"
    assert type(error["exc"]).__name__ == error_kind


@then(parsers.cfparse("a {event_type} event is raised"))
def user_event_raised(user, event_type):
    event_cls = _USER_EVENT_CLASSES[event_type]
    assert any(isinstance(e, event_cls) for e in user._events)


@then("the actor may manage the user")
def actor_may_manage(actor, user):
    assert guard.can_manage_user(actor, user.role_names())


@then("the actor may not manage the user")
def actor_may_not_manage(actor, user):
    assert not guard.can_manage_user(actor, user.role_names())
