"""Order editing: header fields plus detail reconciliation, in one unit of work."""

import json

from protean import handle
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain
from shared.authorization import ActingUser
from shared.errors import Conflict

from fulfillment.domain import fulfillment, logger
from fulfillment.order.order import EDITABLE_FIELDS, Order, normalize_tracking
from fulfillment.utils.transactions import exclusive_unit_of_work


@fulfillment.command(part_of="Order")
class UpdateOrder:
    """Replace an order's editable fields and reconcile its details by id."""

    order_id = Identifier(required=True)
    channel = String(max_length=100)
    store = String(max_length=255)
    buyer = String(max_length=255)
    address = Text()
    courier = String(max_length=100)
    tracking = String(max_length=100)
    sent_before = DateTime()
    details = Text(required=True)  # JSON list of {id?, sku, product_name, variant, quantity, price}
    actor_id = Identifier(required=True)
    actor_roles = Text()


@fulfillment.command_handler(part_of=Order)
class ModificationHandler:
    @handle(UpdateOrder)
    def update_order(self, command):
        actor = ActingUser.from_command(command)
        fields = {key: getattr(command, key) for key in EDITABLE_FIELDS}
        if fields["tracking"]:
            fields["tracking"] = normalize_tracking(fields["tracking"])
        details = json.loads(command.details)

        with exclusive_unit_of_work():
            repo = current_domain.repository_for(Order)
            order = repo.get(command.order_id)

            tracking = fields["tracking"]
            if tracking and tracking != order.tracking and repo.find_by_tracking(tracking) is not None:
                raise Conflict(f"Tracking '{tracking}' already belongs to another order")

            order.update(fields, details, actor)
            repo.add(order)

        logger.info(
            "Order updated",
            order_id=str(order.id),
            detail_count=len(order.details),
            actor_id=actor.id,
        )
        return str(order.id)
