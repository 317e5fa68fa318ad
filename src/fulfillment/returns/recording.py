"""Recording returned parcels against the order they were shipped for."""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain
from shared.errors import Conflict, NotFound

from fulfillment.domain import fulfillment, logger
from fulfillment.order.order import Order, normalize_tracking
from fulfillment.returns.returns import Return
from fulfillment.utils.transactions import exclusive_unit_of_work


@fulfillment.command(part_of="Return")
class RecordReturn:
    new_tracking = String(required=True, max_length=100)
    old_tracking = String(required=True, max_length=100)
    return_type = String(required=True, max_length=50)
    return_reason = Text(required=True)
    return_number = String(max_length=100)
    scrap_number = String(max_length=100)
    actor_id = Identifier(required=True)
    actor_roles = Text()


@fulfillment.command(part_of="Return")
class UpdateReturn:
    return_id = Identifier(required=True)
    return_number = String(max_length=100)
    scrap_number = String(max_length=100)
    actor_id = Identifier(required=True)
    actor_roles = Text()


@fulfillment.command_handler(part_of=Return)
class ReturnHandler:
    @handle(RecordReturn)
    def record_return(self, command):
        new_tracking = normalize_tracking(command.new_tracking)
        old_tracking = normalize_tracking(command.old_tracking)

        with exclusive_unit_of_work():
            repo = current_domain.repository_for(Return)
            if repo.find_by_new_tracking(new_tracking) is not None:
                raise Conflict(f"A return with tracking '{new_tracking}' already exists")

            order = current_domain.repository_for(Order).find_by_tracking(old_tracking)
            if order is None:
                raise NotFound(f"No order found with tracking '{old_tracking}'")

            parcel = Return.record(
                new_tracking,
                order,
                created_by=str(command.actor_id),
                return_type=command.return_type,
                return_reason=command.return_reason,
                return_number=command.return_number,
                scrap_number=command.scrap_number,
            )
            repo.add(parcel)

        logger.info("Return recorded", new_tracking=new_tracking, old_tracking=old_tracking, order_id=str(order.id))
        return str(parcel.id)

    @handle(UpdateReturn)
    def update_return(self, command):
        with exclusive_unit_of_work():
            repo = current_domain.repository_for(Return)
            parcel = repo.get(command.return_id)
            parcel.update_numbers(command.return_number, command.scrap_number, updated_by=str(command.actor_id))
            repo.add(parcel)

        logger.info("Return updated", new_tracking=parcel.new_tracking, actor_id=str(command.actor_id))
        return str(parcel.id)
