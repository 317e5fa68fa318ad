"""PickedOrder aggregate: the receipt written when a picker finishes an order.

Exactly one receipt exists per completed pick. It snapshots the order's lines
so later edits to the order never rewrite what was physically picked.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, HasMany, Identifier, Integer, String

from fulfillment.domain import fulfillment


@fulfillment.entity(part_of="PickedOrder")
class PickedOrderLine:
    sku = String(required=True, max_length=100)
    product_name = String(required=True, max_length=255)
    variant = String(max_length=255)
    quantity = Integer(required=True, min_value=1)


@fulfillment.aggregate
class PickedOrder:
    order_id = Identifier(required=True)
    order_ginee_id = String(required=True, max_length=100)
    tracking = String(required=True, max_length=100)
    picked_by = Identifier(required=True)
    lines = HasMany(PickedOrderLine)
    created_at = DateTime()

    @classmethod
    def from_order(cls, order, picked_by: str) -> "PickedOrder":
        receipt = cls(
            order_id=str(order.id),
            order_ginee_id=order.order_ginee_id,
            tracking=order.tracking,
            picked_by=picked_by,
            created_at=datetime.now(UTC),
        )
        for detail in order.details or []:
            receipt.add_lines(
                PickedOrderLine(
                    sku=detail.sku,
                    product_name=detail.product_name,
                    variant=detail.variant,
                    quantity=detail.quantity,
                )
            )
        return receipt


@fulfillment.repository(part_of=PickedOrder)
class PickedOrderRepository:
    def for_order(self, order_id: str) -> list[PickedOrder]:
        return self._dao.query.filter(order_id=order_id).all().items
