"""Order aggregate: the unit of warehouse fulfillment work.

An order carries two independent status axes:

    processing_status  ready to pick → picking process → picking complete
                       picking process → pending picking → picking process
                       QC and outbound stages write further values
                       (qc process, qc complete, completed) on their own.
    event_status       None | changed | duplicated | cancelled

Guards are written as exclusion lists over ``processing_status`` so values
written by other stages pass through untouched, while the few states that must
not be disturbed mid-flight stay protected. Only ``cancelled`` on the second
axis blocks transitions.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
)
from shared.authorization import ActingUser
from shared.errors import Forbidden, InvalidState, NotFound

from fulfillment.domain import fulfillment
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
    QcCompleted,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ProcessingStatus(Enum):
    READY_TO_PICK = "ready to pick"
    PICKING_PROCESS = "picking process"
    PENDING_PICKING = "pending picking"
    PICKING_COMPLETE = "picking complete"
    QC_PROCESS = "qc process"
    QC_COMPLETE = "qc complete"
    COMPLETED = "completed"


class EventStatus(Enum):
    CHANGED = "changed"
    DUPLICATED = "duplicated"
    CANCELLED = "cancelled"


_ASSIGN_BLOCKED = {
    ProcessingStatus.PICKING_PROCESS.value,
    ProcessingStatus.QC_PROCESS.value,
    ProcessingStatus.COMPLETED.value,
}

_SELF_PICKABLE = {
    ProcessingStatus.READY_TO_PICK.value,
    ProcessingStatus.PENDING_PICKING.value,
}

# Editing, cancelling and duplicating share this guard
_IN_FLIGHT = {
    ProcessingStatus.PICKING_PROCESS.value,
    ProcessingStatus.QC_PROCESS.value,
}

HEADER_FIELDS = ("channel", "store", "buyer", "address", "courier", "sent_before")
EDITABLE_FIELDS = (*HEADER_FIELDS, "tracking")

DUPLICATE_ID_SUFFIX = "-X2"
DUPLICATE_TRACKING_PREFIX = "X-"


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@fulfillment.entity(part_of="Order")
class OrderDetail:
    """A line item. Products are matched by sku at read time, never owned."""

    sku = String(required=True, max_length=100)
    product_name = String(required=True, max_length=255)
    variant = String(max_length=255)
    quantity = Integer(required=True, min_value=1)
    price = Integer(default=0, min_value=0)

    def snapshot(self) -> dict:
        return {
            "sku": self.sku,
            "product_name": self.product_name,
            "variant": self.variant,
            "quantity": self.quantity,
            "price": self.price,
        }


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@fulfillment.aggregate
class Order:
    order_ginee_id = String(required=True, max_length=100)
    tracking = String(required=True, max_length=100)
    processing_status = String(max_length=50, default=ProcessingStatus.READY_TO_PICK.value)
    event_status = String(max_length=50, choices=EventStatus)
    channel = String(max_length=100)
    store = String(max_length=255)
    buyer = String(max_length=255)
    address = Text()
    courier = String(max_length=100)
    sent_before = DateTime()
    details = HasMany(OrderDetail)

    assigned_by = Identifier()
    assigned_at = DateTime()
    picked_by = Identifier()
    picked_at = DateTime()
    pending_by = Identifier()
    pending_at = DateTime()
    changed_by = Identifier()
    changed_at = DateTime()
    cancelled_by = Identifier()
    cancelled_at = DateTime()

    complained = Boolean(default=False)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        order_ginee_id: str,
        tracking: str,
        details_data: list[dict],
        **header,
    ) -> "Order":
        """Create a ready-to-pick order from an intake row."""
        if not details_data:
            raise ValidationError({"details": ["An order needs at least one detail"]})

        now = datetime.now(UTC)
        order = cls(
            order_ginee_id=order_ginee_id,
            tracking=tracking,
            processing_status=ProcessingStatus.READY_TO_PICK.value,
            created_at=now,
            updated_at=now,
            **{key: value for key, value in header.items() if key in HEADER_FIELDS},
        )
        for detail_data in details_data:
            order.add_details(OrderDetail(**_detail_fields(detail_data)))

        order.raise_(
            OrderCreated(
                order_id=str(order.id),
                order_ginee_id=order_ginee_id,
                tracking=tracking,
                detail_count=len(details_data),
                created_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Guards
    # -------------------------------------------------------------------
    @property
    def is_cancelled(self) -> bool:
        return self.event_status == EventStatus.CANCELLED.value

    def _ensure_not_cancelled(self, action: str) -> None:
        if self.is_cancelled:
            raise InvalidState(f"Cannot {action} a cancelled order", self.event_status)

    def _ensure_status_not_in(self, blocked: set[str], action: str) -> None:
        if self.processing_status in blocked:
            raise InvalidState(f"Cannot {action} while order is '{self.processing_status}'", self.processing_status)

    def _ensure_status_in(self, allowed: set[str], action: str) -> None:
        if self.processing_status not in allowed:
            raise InvalidState(f"Cannot {action} while order is '{self.processing_status}'", self.processing_status)

    def _touch(self, now: datetime) -> None:
        self.updated_at = now

    # -------------------------------------------------------------------
    # Picking
    # -------------------------------------------------------------------
    def assign_picker(self, picker_id: str, actor: ActingUser) -> None:
        """Hand the order to a picker. The caller has already checked rank."""
        self._ensure_not_cancelled("assign a picker to")
        self._ensure_status_not_in(_ASSIGN_BLOCKED, "assign a picker")

        now = datetime.now(UTC)
        self.assigned_by = actor.id
        self.assigned_at = now
        self.picked_by = picker_id
        self.processing_status = ProcessingStatus.PICKING_PROCESS.value
        self._touch(now)
        self.raise_(
            PickerAssigned(
                order_id=str(self.id),
                picker_id=picker_id,
                assigned_by=actor.id,
                assigned_at=now,
            )
        )

    def pick(self, actor: ActingUser) -> None:
        """Self-service pick from the ready or pending pool."""
        self._ensure_not_cancelled("pick")
        self._ensure_status_in(_SELF_PICKABLE, "pick")

        now = datetime.now(UTC)
        self.picked_by = actor.id
        self.picked_at = now
        self.processing_status = ProcessingStatus.PICKING_PROCESS.value
        self._touch(now)
        self.raise_(OrderPicked(order_id=str(self.id), picked_by=actor.id, picked_at=now))

    def complete_picking(self, actor: ActingUser) -> None:
        self._ensure_not_cancelled("complete picking on")
        self._ensure_status_in({ProcessingStatus.PICKING_PROCESS.value}, "complete picking")
        if str(self.picked_by) != actor.id:
            raise Forbidden("Only the assigned picker can complete picking")

        now = datetime.now(UTC)
        self.picked_at = now
        self.processing_status = ProcessingStatus.PICKING_COMPLETE.value
        self._touch(now)
        self.raise_(PickingCompleted(order_id=str(self.id), picked_by=actor.id, completed_at=now))

    def set_pending(self, actor: ActingUser) -> None:
        """Return the order to the unassigned pool."""
        self._ensure_not_cancelled("set pending")
        self._ensure_status_in({ProcessingStatus.PICKING_PROCESS.value}, "set pending")

        now = datetime.now(UTC)
        self.processing_status = ProcessingStatus.PENDING_PICKING.value
        self.pending_by = actor.id
        self.pending_at = now
        self.picked_by = None
        self.assigned_by = None
        self.assigned_at = None
        self._touch(now)
        self.raise_(PickingSetPending(order_id=str(self.id), pending_by=actor.id, pending_at=now))

    # -------------------------------------------------------------------
    # Editing
    # -------------------------------------------------------------------
    def update(self, fields: dict, details_data: list[dict], actor: ActingUser) -> None:
        """Replace header fields and reconcile the detail list by id.

        A detail without an id (or with id 0) is inserted, a known id is
        updated in place and every existing detail left out of
        ``details_data`` is deleted. Everything is validated before the first
        attribute changes.
        """
        self._ensure_not_cancelled("edit")
        self._ensure_status_not_in(_IN_FLIGHT, "edit")

        existing = {str(detail.id): detail for detail in self.details or []}
        updates: dict[str, dict] = {}
        inserts: list[dict] = []
        for detail_data in details_data:
            detail_id = _detail_id(detail_data)
            if detail_id is None:
                inserts.append(_detail_fields(detail_data))
                continue
            if detail_id not in existing:
                raise NotFound(f"Order detail '{detail_id}' does not belong to this order")
            if detail_id in updates:
                raise ValidationError({"details": [f"Detail '{detail_id}' is listed more than once"]})
            updates[detail_id] = _detail_fields(detail_data)

        if not inserts and not updates:
            raise ValidationError({"details": ["An order needs at least one detail"]})

        new_details = [OrderDetail(**data) for data in inserts]
        for data in updates.values():
            # Validate through a throwaway entity before touching the real one
            OrderDetail(**data)

        now = datetime.now(UTC)
        for key in EDITABLE_FIELDS:
            if key in fields and fields[key] is not None:
                setattr(self, key, fields[key])

        for detail in new_details:
            self.add_details(detail)
        for detail_id, data in updates.items():
            detail = existing[detail_id]
            for key, value in data.items():
                setattr(detail, key, value)
        for detail_id, detail in existing.items():
            if detail_id not in updates:
                self.remove_details(detail)

        self.event_status = EventStatus.CHANGED.value
        self.changed_by = actor.id
        self.changed_at = now
        self._touch(now)
        self.raise_(
            OrderChanged(
                order_id=str(self.id),
                changed_by=actor.id,
                detail_count=len(self.details),
                changed_at=now,
            )
        )

    def cancel(self, actor: ActingUser) -> None:
        self._ensure_not_cancelled("cancel")
        self._ensure_status_not_in(_IN_FLIGHT, "cancel")

        now = datetime.now(UTC)
        self.event_status = EventStatus.CANCELLED.value
        self.cancelled_by = actor.id
        self.cancelled_at = now
        self._touch(now)
        self.raise_(OrderCancelled(order_id=str(self.id), cancelled_by=actor.id, cancelled_at=now))

    def duplicate(self, actor: ActingUser) -> "Order":
        """Move this order's identifiers onto a fresh copy and return the copy.

        This order keeps its data under ``<id>-X2`` / ``X-<tracking>``; the
        copy takes over the original external id and tracking with the same
        details.
        """
        self._ensure_not_cancelled("duplicate")
        self._ensure_status_not_in(_IN_FLIGHT, "duplicate")

        now = datetime.now(UTC)
        original_id, original_tracking = self.order_ginee_id, self.tracking

        copy = Order(
            order_ginee_id=original_id,
            tracking=original_tracking,
            processing_status=self.processing_status,
            event_status=EventStatus.DUPLICATED.value,
            channel=self.channel,
            store=self.store,
            buyer=self.buyer,
            address=self.address,
            courier=self.courier,
            sent_before=self.sent_before,
            changed_by=actor.id,
            changed_at=now,
            complained=False,
            created_at=now,
            updated_at=now,
        )
        for detail in self.details or []:
            copy.add_details(OrderDetail(**detail.snapshot()))

        self.order_ginee_id = duplicate_external_id(original_id)
        self.tracking = duplicate_tracking(original_tracking)
        self._touch(now)
        self.raise_(
            OrderDuplicated(
                order_id=str(self.id),
                copy_id=str(copy.id),
                order_ginee_id=original_id,
                tracking=original_tracking,
                duplicated_by=actor.id,
                duplicated_at=now,
            )
        )
        return copy

    # -------------------------------------------------------------------
    # Side channels that ignore the state machine
    # -------------------------------------------------------------------
    def mark_complained(self, complained: bool = True) -> None:
        now = datetime.now(UTC)
        self.complained = complained
        self._touch(now)
        self.raise_(ComplaintFlagged(order_id=str(self.id), complained=complained, flagged_at=now))

    def record_qc_complete(self) -> None:
        """Written by the QC-online stage, which owns this status value."""
        now = datetime.now(UTC)
        self.processing_status = ProcessingStatus.QC_COMPLETE.value
        self._touch(now)
        self.raise_(QcCompleted(order_id=str(self.id), tracking=self.tracking, completed_at=now))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def duplicate_external_id(order_ginee_id: str) -> str:
    return f"{order_ginee_id}{DUPLICATE_ID_SUFFIX}"


def duplicate_tracking(tracking: str) -> str:
    return f"{DUPLICATE_TRACKING_PREFIX}{tracking}"


def _detail_id(detail_data: dict) -> str | None:
    detail_id = detail_data.get("id")
    if detail_id in (None, "", 0, "0"):
        return None
    return str(detail_id)


def _detail_fields(detail_data: dict) -> dict:
    return {
        "sku": detail_data.get("sku"),
        "product_name": detail_data.get("product_name"),
        "variant": detail_data.get("variant"),
        "quantity": detail_data.get("quantity"),
        "price": detail_data.get("price") or 0,
    }


def normalize_tracking(tracking: str) -> str:
    return (tracking or "").strip().upper()
