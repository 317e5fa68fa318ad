"""Order domain events, raised by each state-machine transition."""

from protean.fields import Boolean, DateTime, Identifier, Integer, String

from fulfillment.domain import fulfillment


@fulfillment.event(part_of="Order")
class OrderCreated:
    """An order entered the warehouse through bulk intake."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_ginee_id = String(required=True)
    tracking = String(required=True)
    detail_count = Integer(required=True)
    created_at = DateTime(required=True)


@fulfillment.event(part_of="Order")
class PickerAssigned:
    """A coordinator handed the order to a picker."""

    __version__ = 1

    order_id = Identifier(required=True)
    picker_id = Identifier(required=True)
    assigned_by = Identifier(required=True)
    assigned_at = DateTime(required=True)


@fulfillment.event(part_of="Order")
class OrderPicked:
    """A picker took the order from the pool."""

    __version__ = 1

    order_id = Identifier(required=True)
    picked_by = Identifier(required=True)
    picked_at = DateTime(required=True)


@fulfillment.event(part_of="Order")
class PickingCompleted:
    __version__ = 1

    order_id = Identifier(required=True)
    picked_by = Identifier(required=True)
    completed_at = DateTime(required=True)


@fulfillment.event(part_of="Order")
class PickingSetPending:
    """The order went back to the unassigned pool."""

    __version__ = 1

    order_id = Identifier(required=True)
    pending_by = Identifier(required=True)
    pending_at = DateTime(required=True)


@fulfillment.event(part_of="Order")
class OrderChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    changed_by = Identifier(required=True)
    detail_count = Integer(required=True)
    changed_at = DateTime(required=True)


@fulfillment.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id = Identifier(required=True)
    cancelled_by = Identifier(required=True)
    cancelled_at = DateTime(required=True)


@fulfillment.event(part_of="Order")
class OrderDuplicated:
    """The order's identifiers moved to a fresh copy of it."""

    __version__ = 1

    order_id = Identifier(required=True)
    copy_id = Identifier(required=True)
    order_ginee_id = String(required=True)
    tracking = String(required=True)
    duplicated_by = Identifier(required=True)
    duplicated_at = DateTime(required=True)


@fulfillment.event(part_of="Order")
class ComplaintFlagged:
    __version__ = 1

    order_id = Identifier(required=True)
    complained = Boolean(default=True)
    flagged_at = DateTime(required=True)


@fulfillment.event(part_of="Order")
class QcCompleted:
    """The QC-online stage signed off on the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    tracking = String(required=True)
    completed_at = DateTime(required=True)
