"""Integration tests for the complaint and return API endpoints via TestClient."""

from uuid import uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from fulfillment.api.routes import complaint_router, order_router, return_router
from shared.api import register_exception_handlers

ADMIN = {"X-Actor-Id": "admin-1", "X-Actor-Roles": "admin"}
PICKER = {"X-Actor-Id": "picker-1", "X-Actor-Roles": "picker"}


@pytest.fixture()
def client():
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(order_router)
    app.include_router(complaint_router)
    app.include_router(return_router)
    return TestClient(app)


def _create_order(client):
    row = {
        "order_ginee_id": f"G-{uuid4().hex[:8]}",
        "tracking": f"CAP{uuid4().hex[:10].upper()}",
        "details": [{"sku": "SKU-001", "product_name": "Ribbon", "quantity": 2}],
    }
    response = client.post("/orders/bulk", json={"orders": [row]}, headers=ADMIN)
    assert response.status_code == 201
    return client.get(f"/orders/tracking/{row['tracking']}").json()


def _file(client, tracking, headers=PICKER):
    return client.post("/complaints", json={"tracking": tracking, "description": "Wrong item"}, headers=headers)


class TestComplaintAPI:
    def test_file_returns_complaint_and_flags_order(self, client):
        order = _create_order(client)
        response = _file(client, order["tracking"].lower())

        assert response.status_code == 201
        body = response.json()
        assert body["tracking"] == order["tracking"]
        assert body["order_id"] == order["id"]
        assert body["lines"][0]["sku"] == "SKU-001"
        assert client.get(f"/orders/{order['id']}").json()["complained"] is True

    def test_duplicate_is_conflict(self, client):
        order = _create_order(client)
        _file(client, order["tracking"])
        assert _file(client, order["tracking"]).status_code == 409

    def test_unknown_tracking_is_not_found(self, client):
        assert _file(client, "NOPE-0000").status_code == 404

    def test_solution_and_check(self, client):
        complaint = _file(client, _create_order(client)["tracking"]).json()

        response = client.put(
            f"/complaints/{complaint['id']}/solution",
            json={
                "solution": "Refund",
                "total_fee": 5000,
                "operators": [{"operator_id": "picker-1", "stage": "picking", "fee_charge": 5000}],
            },
            headers=ADMIN,
        )
        assert response.status_code == 200
        assert response.json()["total_fee"] == 5000
        assert response.json()["operators"] == [{"operator_id": "picker-1", "stage": "picking", "fee_charge": 5000}]

        response = client.put(f"/complaints/{complaint['id']}/check", json={"checked": True}, headers=ADMIN)
        assert response.json()["checked"] is True

    def test_picker_cannot_resolve(self, client):
        complaint = _file(client, _create_order(client)["tracking"]).json()
        response = client.put(f"/complaints/{complaint['id']}/solution", json={"solution": "Refund"}, headers=PICKER)
        assert response.status_code == 403

    def test_list_searches_by_tracking(self, client):
        order = _create_order(client)
        _file(client, order["tracking"])

        response = client.get("/complaints", params={"search": order["tracking"][-8:]})
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["items"][0]["tracking"] == order["tracking"]


class TestReturnAPI:
    def test_record_update_and_lookup(self, client):
        order = _create_order(client)
        new_tracking = f"RTN{uuid4().hex[:8].upper()}"
        response = client.post(
            "/returns",
            json={
                "new_tracking": new_tracking.lower(),
                "old_tracking": order["tracking"],
                "return_type": "refund",
                "return_reason": "Damaged",
            },
            headers=PICKER,
        )
        assert response.status_code == 201
        parcel = response.json()
        assert parcel["new_tracking"] == new_tracking
        assert parcel["order_id"] == order["id"]

        response = client.put(f"/returns/{parcel['id']}", json={"return_number": "RN-1"}, headers=ADMIN)
        assert response.json()["return_number"] == "RN-1"

        response = client.get(f"/returns/tracking/{new_tracking.lower()}")
        assert response.status_code == 200
        assert response.json()["id"] == parcel["id"]

    def test_unknown_return_tracking_is_not_found(self, client):
        assert client.get("/returns/tracking/NOPE-0000").status_code == 404
