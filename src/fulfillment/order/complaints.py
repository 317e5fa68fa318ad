"""Complaint flag on orders. Independent of the processing state machine."""

from protean import handle
from protean.fields import Boolean, Identifier, Text
from protean.utils.globals import current_domain

from fulfillment.domain import fulfillment, logger
from fulfillment.order.order import Order
from fulfillment.utils.transactions import exclusive_unit_of_work


@fulfillment.command(part_of="Order")
class MarkComplained:
    order_id = Identifier(required=True)
    complained = Boolean(default=True)
    actor_id = Identifier(required=True)
    actor_roles = Text()


@fulfillment.command_handler(part_of=Order)
class ComplaintHandler:
    @handle(MarkComplained)
    def mark_complained(self, command):
        with exclusive_unit_of_work():
            repo = current_domain.repository_for(Order)
            order = repo.get(command.order_id)
            order.mark_complained(bool(command.complained))
            repo.add(order)

        logger.info(
            "Complaint flag set",
            order_id=str(order.id),
            complained=order.complained,
            actor_id=str(command.actor_id),
        )
        return str(order.id)
