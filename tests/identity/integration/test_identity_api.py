"""Integration tests for Identity API endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from identity.api.routes import role_router, user_router
from shared.api import register_exception_handlers

ROOT = {"X-Actor-Id": "root", "X-Actor-Roles": "superadmin"}
COORDINATOR = {"X-Actor-Id": "coord-1", "X-Actor-Roles": "coordinator"}
ADMIN = {"X-Actor-Id": "admin-1", "X-Actor-Roles": "admin"}


@pytest.fixture()
def client():
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(user_router)
    app.include_router(role_router)
    client = TestClient(app)
    client.post("/roles/seed", headers=ROOT)
    return client


def _create_user(client, username="budi", role=None, headers=ROOT):
    payload = {"username": username, "email": f"{username}@example.com", "password": "s3cret!"}
    if role:
        payload["role"] = role
    response = client.post("/users", json=payload, headers=headers)
    assert response.status_code == 201
    return response.json()["user_id"]


class TestRoleAPI:
    def test_roles_are_listed_by_rank(self, client):
        response = client.get("/roles")
        assert response.status_code == 200
        roles = response.json()
        assert roles[0]["name"] == "superadmin"
        assert roles[-1]["name"] == "guest"

    def test_only_superadmin_seeds(self, client):
        assert client.post("/roles/seed", headers=COORDINATOR).status_code == 403


class TestUserAPI:
    def test_create_and_get(self, client):
        user_id = _create_user(client, role="picker")
        response = client.get(f"/users/{user_id}")
        assert response.status_code == 200
        body = response.json()
        assert body["username"] == "budi"
        assert body["effective_rank"] == 2
        assert [role["role_name"] for role in body["roles"]] == ["picker"]

    def test_missing_actor_is_401(self, client):
        response = client.post("/users", json={"username": "x", "email": "x@example.com", "password": "s3cret!"})
        assert response.status_code == 401

    def test_admin_cannot_reach_user_management(self, client):
        response = client.post(
            "/users",
            json={"username": "x", "email": "x@example.com", "password": "s3cret!"},
            headers=ADMIN,
        )
        assert response.status_code == 403

    def test_duplicate_username_is_409(self, client):
        _create_user(client)
        response = client.post(
            "/users",
            json={"username": "budi", "email": "other@example.com", "password": "s3cret!"},
            headers=ROOT,
        )
        assert response.status_code == 409

    def test_short_password_is_rejected_at_the_boundary(self, client):
        response = client.post(
            "/users",
            json={"username": "x", "email": "x@example.com", "password": "123"},
            headers=ROOT,
        )
        assert response.status_code == 422

    def test_assign_and_remove_role(self, client):
        user_id = _create_user(client)
        response = client.post(f"/users/{user_id}/roles", json={"role_name": "picker"}, headers=COORDINATOR)
        assert response.status_code == 201
        assert "picker" in [role["role_name"] for role in response.json()["roles"]]

        response = client.delete(f"/users/{user_id}/roles/picker", headers=COORDINATOR)
        assert response.status_code == 200
        assert "picker" not in [role["role_name"] for role in response.json()["roles"]]

    def test_coordinator_cannot_grant_superadmin(self, client):
        user_id = _create_user(client)
        response = client.post(f"/users/{user_id}/roles", json={"role_name": "superadmin"}, headers=COORDINATOR)
        assert response.status_code == 403

    def test_deleted_user_is_404(self, client):
        user_id = _create_user(client, role="picker")
        assert client.delete(f"/users/{user_id}", headers=COORDINATOR).status_code == 200
        assert client.get(f"/users/{user_id}").status_code == 404

    def test_unknown_user_is_404(self, client):
        assert client.get("/users/does-not-exist").status_code == 404

    def test_profile_edit_by_peer(self, client):
        user_id = _create_user(client, role="admin")
        response = client.put(f"/users/{user_id}/profile", json={"full_name": "Budi S"}, headers=ADMIN)
        assert response.status_code == 200
        assert response.json()["full_name"] == "Budi S"
