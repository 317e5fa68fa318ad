"""Order duplication: frees an order's identifiers for a fresh copy of it.

The source order is renamed to ``<external id>-X2`` / ``X-<tracking>`` and a
new order takes over the original identifiers with the same details. Both
writes share the handler's unit of work.
"""

from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain
from shared.authorization import ActingUser
from shared.errors import Conflict

from fulfillment.domain import fulfillment, logger
from fulfillment.order.order import Order, duplicate_external_id, duplicate_tracking
from fulfillment.utils.transactions import exclusive_unit_of_work


@fulfillment.command(part_of="Order")
class DuplicateOrder:
    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_roles = Text()


@fulfillment.command_handler(part_of=Order)
class DuplicationHandler:
    @handle(DuplicateOrder)
    def duplicate_order(self, command):
        """Returns ``{"original_id": ..., "copy_id": ...}``."""
        actor = ActingUser.from_command(command)
        with exclusive_unit_of_work():
            repo = current_domain.repository_for(Order)
            order = repo.get(command.order_id)

            renamed_id = duplicate_external_id(order.order_ginee_id)
            renamed_tracking = duplicate_tracking(order.tracking)
            if repo.find_by_external_id(renamed_id) is not None:
                raise Conflict(f"An order with external id '{renamed_id}' already exists")
            if repo.find_by_tracking(renamed_tracking) is not None:
                raise Conflict(f"An order with tracking '{renamed_tracking}' already exists")

            copy = order.duplicate(actor)
            repo.add(order)
            repo.add(copy)

        logger.info(
            "Order duplicated",
            order_id=str(order.id),
            copy_id=str(copy.id),
            actor_id=actor.id,
        )
        return {"original_id": str(order.id), "copy_id": str(copy.id)}
