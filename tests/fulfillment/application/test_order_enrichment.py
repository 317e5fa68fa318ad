"""Application tests for product enrichment of order details."""

import json
from uuid import uuid4

import pytest
from fulfillment.order.enrichment import order_view
from fulfillment.order.intake import BulkCreateOrders
from fulfillment.order.order import Order
from fulfillment.product.product import RegisterProduct
from protean import current_domain
from shared.errors import Conflict

ADMIN = {"actor_id": "admin-1", "actor_roles": json.dumps(["admin"])}


def _register(sku, **fields):
    return current_domain.process(
        RegisterProduct(sku=sku, name=fields.pop("name", "Ribbon"), **fields, **ADMIN),
        asynchronous=False,
    )


def _order_with(skus):
    tracking = f"ENR{uuid4().hex[:10].upper()}"
    rows = [
        {
            "order_ginee_id": f"G-{uuid4().hex[:8]}",
            "tracking": tracking,
            "details": [{"sku": sku, "product_name": sku, "quantity": 1} for sku in skus],
        }
    ]
    current_domain.process(BulkCreateOrders(orders=json.dumps(rows), **ADMIN), asynchronous=False)
    return current_domain.repository_for(Order).find_by_tracking(tracking)


class TestOrderView:
    def test_known_skus_carry_product_summary(self):
        sku = f"SKU-{uuid4().hex[:6]}"
        _register(sku, name="Satin Ribbon", location="A-01", barcode="899123")
        order = _order_with([sku])

        view = order_view(order)

        product = view["details"][0]["product"]
        assert product["name"] == "Satin Ribbon"
        assert product["location"] == "A-01"

    def test_unknown_skus_have_no_product(self):
        order = _order_with([f"SKU-{uuid4().hex[:6]}"])
        assert order_view(order)["details"][0]["product"] is None

    def test_view_carries_status_and_identity(self):
        order = _order_with([f"SKU-{uuid4().hex[:6]}"])
        view = order_view(order)
        assert view["id"] == str(order.id)
        assert view["processing_status"] == "ready to pick"


class TestRegisterProduct:
    def test_duplicate_sku_is_a_conflict(self):
        sku = f"SKU-{uuid4().hex[:6]}"
        _register(sku)
        with pytest.raises(Conflict):
            _register(sku)
