"""Order cancellation: command and handler."""

from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain
from shared.authorization import ActingUser

from fulfillment.domain import fulfillment, logger
from fulfillment.order.order import Order
from fulfillment.utils.transactions import exclusive_unit_of_work


@fulfillment.command(part_of="Order")
class CancelOrder:
    """Cancel an order that is not mid-pick or mid-QC. Cancellation is final."""

    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_roles = Text()


@fulfillment.command_handler(part_of=Order)
class CancellationHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        actor = ActingUser.from_command(command)
        with exclusive_unit_of_work():
            repo = current_domain.repository_for(Order)
            order = repo.get(command.order_id)
            order.cancel(actor)
            repo.add(order)

        logger.info("Order cancelled", order_id=str(order.id), actor_id=actor.id)
        return str(order.id)
