"""Shared BDD fixtures and step definitions for the order lifecycle."""

import pytest
from fulfillment.order.events import (
    ComplaintFlagged,
    OrderCancelled,
    OrderChanged,
    OrderCreated,
    OrderDuplicated,
    OrderPicked,
    PickerAssigned,
    PickingCompleted,
    PickingSetPending,
)
from fulfillment.order.order import Order
from pytest_bdd import given, parsers, then

_ORDER_EVENT_CLASSES = {
    "OrderCreated": OrderCreated,
    "PickerAssigned": PickerAssigned,
    "OrderPicked": OrderPicked,
    "PickingCompleted": PickingCompleted,
    "PickingSetPending": PickingSetPending,
    "OrderChanged": OrderChanged,
    "OrderCancelled": OrderCancelled,
    "OrderDuplicated": OrderDuplicated,
    "ComplaintFlagged": ComplaintFlagged,
}

_DEFAULT_DETAILS = [
    {"sku": "RBN-SATIN-RED", "product_name": "Satin Ribbon", "variant": "Red", "quantity": 3, "price": 12000},
    {"sku": "LBL-A6", "product_name": "Shipping Label A6", "quantity": 1, "price": 2500},
]

def _new_order(suffix: str) -> Order:
    return Order.create(
        order_ginee_id=f"G-BDD-{suffix}",
        tracking=f"JNTBDD{suffix}",
        details_data=_DEFAULT_DETAILS,
        channel="Tokopedia",
    )


@pytest.fixture()
def error():
    """Container for captured domain errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a ready to pick order", target_fixture="order")
def ready_order():
    order = _new_order("001")
    order._events.clear()
    return order


@given(parsers.cfparse('an order being picked by "{picker}"'), target_fixture="order")
def picking_order(picker, coordinator):
    order = _new_order("002")
    order.assign_picker(picker, coordinator)
    order._events.clear()
    return order


@given("a cancelled order", target_fixture="order")
def cancelled_order(admin):
    order = _new_order("003")
    order.cancel(admin)
    order._events.clear()
    return order


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the processing status is "{status}"'))
def processing_status_is(order, status):
    assert order.processing_status == status


@then(parsers.cfparse('the event status is "{status}"'))
def event_status_is(order, status):
    assert order.event_status == status


@then(parsers.cfparse("the action fails with {error_kind}"))
def action_fails_with(error, error_kind):
    assert error["exc"] is not None, f"Expected {error_kind} but nothing was raised"
    assert type(error["exc"]).__name__ == error_kind


@then(parsers.re(r"an? (?P<event_type>\w+) event is raised"))
def order_event_raised(order, event_type):
    event_cls = _ORDER_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in order._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in order._events]}"


@then(parsers.cfparse('the order is picked by "{picker}"'))
def order_picked_by(order, picker):
    assert str(order.picked_by) == picker
