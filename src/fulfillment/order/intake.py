"""Bulk order intake.

Rows whose external id already exists are skipped rather than rejected, so a
marketplace export can be re-imported safely. Malformed rows are counted as
failed and logged; they never abort the rest of the batch.
"""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from fulfillment.domain import fulfillment, logger
from fulfillment.order.order import Order, normalize_tracking
from fulfillment.utils.transactions import exclusive_unit_of_work

_IDENTIFYING_KEYS = ("order_ginee_id", "tracking", "details")


@fulfillment.command(part_of="Order")
class BulkCreateOrders:
    orders = Text(required=True)  # JSON list of order rows, each with a "details" list
    actor_id = Identifier(required=True)
    actor_roles = Text()


@fulfillment.command_handler(part_of=Order)
class IntakeHandler:
    @handle(BulkCreateOrders)
    def bulk_create(self, command):
        """Returns ``{"total", "created", "skipped", "failed"}`` counts."""
        rows = json.loads(command.orders)
        summary = {"total": len(rows), "created": 0, "skipped": 0, "failed": 0}

        with exclusive_unit_of_work():
            repo = current_domain.repository_for(Order)
            seen_ids: set[str] = set()
            seen_trackings: set[str] = set()

            for index, row in enumerate(rows):
                external_id = row.get("order_ginee_id")
                tracking = normalize_tracking(row.get("tracking"))
                if not external_id or not tracking:
                    logger.warning("Intake row missing identifiers", row=index)
                    summary["failed"] += 1
                    continue

                if external_id in seen_ids or repo.find_by_external_id(external_id) is not None:
                    summary["skipped"] += 1
                    continue

                if tracking in seen_trackings or repo.find_by_tracking(tracking) is not None:
                    logger.warning("Intake row reuses a tracking number", row=index, tracking=tracking)
                    summary["failed"] += 1
                    continue

                try:
                    order = Order.create(
                        order_ginee_id=external_id,
                        tracking=tracking,
                        details_data=row.get("details") or [],
                        **{key: value for key, value in row.items() if key not in _IDENTIFYING_KEYS},
                    )
                except ValidationError as exc:
                    logger.warning("Intake row rejected", row=index, errors=exc.messages)
                    summary["failed"] += 1
                    continue

                repo.add(order)
                seen_ids.add(external_id)
                seen_trackings.add(tracking)
                summary["created"] += 1

        logger.info("Bulk intake finished", actor_id=str(command.actor_id), **summary)
        return summary
