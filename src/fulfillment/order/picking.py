"""Order picking: commands and handler.

Covers coordinator assignment, self-service picks, returning an order to the
pending pool and completing a pick. Completion writes the PickedOrder receipt
in the same unit of work as the status change.
"""

from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain
from shared.authorization import ActingUser

from fulfillment.domain import fulfillment, guard, logger
from fulfillment.order.order import Order
from fulfillment.picked_order.picked_order import PickedOrder
from fulfillment.utils.transactions import exclusive_unit_of_work


@fulfillment.command(part_of="Order")
class AssignPicker:
    """A coordinator assigns an order to a picker."""

    order_id = Identifier(required=True)
    picker_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_roles = Text()  # JSON list of role names


@fulfillment.command(part_of="Order")
class PickOrder:
    """A picker takes an order from the ready or pending pool."""

    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_roles = Text()


@fulfillment.command(part_of="Order")
class CompletePicking:
    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_roles = Text()


@fulfillment.command(part_of="Order")
class SetPending:
    """Put an in-progress pick on hold and release the picker."""

    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_roles = Text()


@fulfillment.command_handler(part_of=Order)
class PickingHandler:
    @handle(AssignPicker)
    def assign_picker(self, command):
        actor = ActingUser.from_command(command)
        with exclusive_unit_of_work():
            repo = current_domain.repository_for(Order)
            order = repo.get(command.order_id)
            guard.require_rank(actor, "coordinator")

            order.assign_picker(str(command.picker_id), actor)
            repo.add(order)

        logger.info(
            "Picker assigned",
            order_id=str(order.id),
            picker_id=str(command.picker_id),
            actor_id=actor.id,
        )
        return str(order.id)

    @handle(PickOrder)
    def pick_order(self, command):
        actor = ActingUser.from_command(command)
        with exclusive_unit_of_work():
            repo = current_domain.repository_for(Order)
            order = repo.get(command.order_id)
            order.pick(actor)
            repo.add(order)

        logger.info("Order picked", order_id=str(order.id), actor_id=actor.id)
        return str(order.id)

    @handle(CompletePicking)
    def complete_picking(self, command):
        actor = ActingUser.from_command(command)
        with exclusive_unit_of_work():
            repo = current_domain.repository_for(Order)
            order = repo.get(command.order_id)

            order.complete_picking(actor)
            receipt = PickedOrder.from_order(order, picked_by=actor.id)

            repo.add(order)
            current_domain.repository_for(PickedOrder).add(receipt)

        logger.info(
            "Picking completed",
            order_id=str(order.id),
            picked_order_id=str(receipt.id),
            actor_id=actor.id,
        )
        return str(order.id)

    @handle(SetPending)
    def set_pending(self, command):
        actor = ActingUser.from_command(command)
        with exclusive_unit_of_work():
            repo = current_domain.repository_for(Order)
            order = repo.get(command.order_id)
            order.set_pending(actor)
            repo.add(order)

        logger.info("Order set pending", order_id=str(order.id), actor_id=actor.id)
        return str(order.id)
