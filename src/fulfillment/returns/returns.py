"""Return aggregate: a parcel sent back to the warehouse.

A return arrives under its own tracking number and points back at the order it
came from through that order's tracking. Each new tracking is recorded once.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, HasMany, Identifier, Integer, String, Text

from fulfillment.domain import fulfillment


@fulfillment.entity(part_of="Return")
class ReturnLine:
    sku = String(required=True, max_length=100)
    product_name = String(required=True, max_length=255)
    variant = String(max_length=255)
    quantity = Integer(required=True, min_value=1)


@fulfillment.aggregate(schema_name="returns")
class Return:
    new_tracking = String(required=True, max_length=100)
    old_tracking = String(required=True, max_length=100)
    order_id = Identifier(required=True)
    order_ginee_id = String(max_length=100)
    channel = String(max_length=100)
    store = String(max_length=255)
    return_type = String(required=True, max_length=50)
    return_reason = Text(required=True)
    return_number = String(max_length=100)
    scrap_number = String(max_length=100)
    lines = HasMany(ReturnLine)

    created_by = Identifier(required=True)
    updated_by = Identifier()
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def record(cls, new_tracking: str, order, created_by: str, **fields) -> "Return":
        now = datetime.now(UTC)
        parcel = cls(
            new_tracking=new_tracking,
            old_tracking=order.tracking,
            order_id=str(order.id),
            order_ginee_id=order.order_ginee_id,
            channel=order.channel,
            store=order.store,
            created_by=created_by,
            created_at=now,
            updated_at=now,
            **fields,
        )
        for detail in order.details or []:
            parcel.add_lines(
                ReturnLine(
                    sku=detail.sku,
                    product_name=detail.product_name,
                    variant=detail.variant,
                    quantity=detail.quantity,
                )
            )
        return parcel

    def update_numbers(self, return_number: str | None, scrap_number: str | None, updated_by: str) -> None:
        self.return_number = return_number
        self.scrap_number = scrap_number
        self.updated_by = updated_by
        self.updated_at = datetime.now(UTC)


@fulfillment.repository(part_of=Return)
class ReturnRepository:
    def find_by_new_tracking(self, tracking: str) -> Return | None:
        return self._dao.query.filter(new_tracking=tracking).all().first

    def for_old_tracking(self, tracking: str) -> list[Return]:
        return self._dao.query.filter(old_tracking=tracking).all().items
