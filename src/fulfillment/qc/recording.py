"""Recording QC checks against an order's tracking number."""

from datetime import UTC, datetime

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain
from shared.errors import Conflict, NotFound

from fulfillment.domain import fulfillment, logger
from fulfillment.order.order import Order, normalize_tracking
from fulfillment.qc.qc import QcOnline, QcRibbon
from fulfillment.utils.transactions import exclusive_unit_of_work


@fulfillment.command(part_of="QcRibbon")
class RecordQcRibbon:
    tracking = String(required=True, max_length=100)
    actor_id = Identifier(required=True)
    actor_roles = Text()


@fulfillment.command(part_of="QcOnline")
class RecordQcOnline:
    tracking = String(required=True, max_length=100)
    actor_id = Identifier(required=True)
    actor_roles = Text()


def _record(record_cls, command) -> tuple:
    tracking = normalize_tracking(command.tracking)
    order = current_domain.repository_for(Order).find_by_tracking(tracking)
    if order is None:
        raise NotFound(f"No order found with tracking '{tracking}'")

    repo = current_domain.repository_for(record_cls)
    if repo.find_by_tracking(tracking) is not None:
        raise Conflict(f"{record_cls.__name__} for tracking '{tracking}' already exists")

    record = record_cls(tracking=tracking, qc_by=str(command.actor_id), created_at=datetime.now(UTC))
    repo.add(record)
    return record, order


@fulfillment.command_handler(part_of=QcRibbon)
class QcRibbonHandler:
    @handle(RecordQcRibbon)
    def record_qc_ribbon(self, command):
        with exclusive_unit_of_work():
            record, order = _record(QcRibbon, command)

        logger.info("QC ribbon recorded", tracking=record.tracking, order_id=str(order.id))
        return str(record.id)


@fulfillment.command_handler(part_of=QcOnline)
class QcOnlineHandler:
    @handle(RecordQcOnline)
    def record_qc_online(self, command):
        with exclusive_unit_of_work():
            record, order = _record(QcOnline, command)

            # The online flow signs the order off as QC complete in the same unit of work
            order.record_qc_complete()
            current_domain.repository_for(Order).add(order)

        logger.info("QC online recorded", tracking=record.tracking, order_id=str(order.id))
        return str(record.id)
