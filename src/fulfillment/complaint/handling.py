"""Filing, resolving and checking complaints."""

import json
from datetime import UTC, datetime

from protean import handle
from protean.fields import Boolean, Identifier, Integer, String, Text
from protean.utils.globals import current_domain
from shared.errors import Conflict, NotFound

from fulfillment.complaint.complaint import CODE_PREFIX, Complaint, complaint_code
from fulfillment.domain import fulfillment, logger
from fulfillment.order.order import Order, normalize_tracking
from fulfillment.outbound.outbound import Outbound
from fulfillment.qc.qc import QcOnline, QcRibbon
from fulfillment.utils.transactions import exclusive_unit_of_work

# Stage records that name the operator who handled a parcel, in reporting order
_OPERATOR_SOURCES = (
    ("qc ribbon", QcRibbon, "qc_by"),
    ("qc online", QcOnline, "qc_by"),
    ("outbound", Outbound, "outbound_by"),
)


@fulfillment.command(part_of="Complaint")
class FileComplaint:
    tracking = String(required=True, max_length=100)
    description = Text(required=True)
    actor_id = Identifier(required=True)
    actor_roles = Text()


@fulfillment.command(part_of="Complaint")
class ResolveComplaint:
    complaint_id = Identifier(required=True)
    solution = Text(required=True)
    total_fee = Integer(default=0)
    operators = Text()  # JSON list of {operator_id, stage?, fee_charge}
    actor_id = Identifier(required=True)
    actor_roles = Text()


@fulfillment.command(part_of="Complaint")
class CheckComplaint:
    complaint_id = Identifier(required=True)
    checked = Boolean(default=True)
    actor_id = Identifier(required=True)
    actor_roles = Text()


def _handling_operators(order) -> list[tuple[str, str]]:
    """(stage, operator id) for each distinct operator that touched the parcel."""
    found = []
    for stage, record_cls, attribute in _OPERATOR_SOURCES:
        record = current_domain.repository_for(record_cls).find_by_tracking(order.tracking)
        if record is not None:
            found.append((stage, str(getattr(record, attribute))))
    if order.picked_by:
        found.append(("picking", str(order.picked_by)))

    seen = set()
    operators = []
    for stage, operator_id in found:
        if operator_id not in seen:
            seen.add(operator_id)
            operators.append((stage, operator_id))
    return operators


@fulfillment.command_handler(part_of=Complaint)
class ComplaintCaseHandler:
    @handle(FileComplaint)
    def file_complaint(self, command):
        tracking = normalize_tracking(command.tracking)

        with exclusive_unit_of_work():
            repo = current_domain.repository_for(Complaint)
            if repo.find_by_tracking(tracking) is not None:
                raise Conflict(f"A complaint for tracking '{tracking}' already exists")

            orders = current_domain.repository_for(Order)
            order = orders.find_by_tracking(tracking)
            if order is None:
                raise NotFound(f"No order found with tracking '{tracking}'")

            today = datetime.now(UTC)
            prefix = f"{CODE_PREFIX}{today:%y%m%d}"
            code = complaint_code(today, repo.count_with_code_prefix(prefix) + 1)

            complaint = Complaint.file(
                code,
                order,
                command.description,
                created_by=str(command.actor_id),
                operators=_handling_operators(order),
            )
            repo.add(complaint)

            order.mark_complained(True)
            orders.add(order)

        logger.info("Complaint filed", code=complaint.code, tracking=tracking, order_id=str(order.id))
        return str(complaint.id)

    @handle(ResolveComplaint)
    def resolve_complaint(self, command):
        charges = json.loads(command.operators) if command.operators else []

        with exclusive_unit_of_work():
            repo = current_domain.repository_for(Complaint)
            complaint = repo.get(command.complaint_id)
            complaint.resolve(command.solution, command.total_fee, charges, resolved_by=str(command.actor_id))
            repo.add(complaint)

        logger.info(
            "Complaint resolved",
            code=complaint.code,
            total_fee=complaint.total_fee,
            actor_id=str(command.actor_id),
        )
        return str(complaint.id)

    @handle(CheckComplaint)
    def check_complaint(self, command):
        with exclusive_unit_of_work():
            repo = current_domain.repository_for(Complaint)
            complaint = repo.get(command.complaint_id)
            complaint.mark_checked(bool(command.checked), checked_by=str(command.actor_id))
            repo.add(complaint)

        logger.info("Complaint checked", code=complaint.code, checked=complaint.checked)
        return str(complaint.id)
