"""Recording dispatch of a QC-checked order to its expedition."""

from datetime import UTC, datetime

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain
from shared.errors import Conflict, NotFound

from fulfillment.domain import fulfillment, logger
from fulfillment.order.order import Order, normalize_tracking
from fulfillment.outbound.outbound import MANUAL_EXPEDITION_PREFIX, Expedition, Outbound
from fulfillment.qc.qc import QcOnline, QcRibbon
from fulfillment.utils.transactions import exclusive_unit_of_work


@fulfillment.command(part_of="Expedition")
class RegisterExpedition:
    code = String(required=True, max_length=20)
    name = String(required=True, max_length=100)
    slug = String(required=True, max_length=100)
    color = String(max_length=20)
    actor_id = Identifier(required=True)
    actor_roles = Text()


@fulfillment.command(part_of="Outbound")
class RecordOutbound:
    """Dispatch an order. Expedition fields are only read for manual ``TKP0`` trackings."""

    tracking = String(required=True, max_length=100)
    expedition = String(max_length=100)
    expedition_color = String(max_length=20)
    expedition_slug = String(max_length=100)
    actor_id = Identifier(required=True)
    actor_roles = Text()


@fulfillment.command_handler(part_of=Expedition)
class ExpeditionHandler:
    @handle(RegisterExpedition)
    def register_expedition(self, command):
        code = command.code.strip().upper()
        with exclusive_unit_of_work():
            repo = current_domain.repository_for(Expedition)
            if repo.find_by_code(code) is not None:
                raise Conflict(f"Expedition code '{code}' already exists")

            expedition = Expedition(code=code, name=command.name, slug=command.slug, color=command.color)
            repo.add(expedition)
        return str(expedition.id)


def _expedition_for(tracking: str, command) -> tuple:
    """``(name, color, slug)`` from the request for manual trackings, else by prefix."""
    if tracking.startswith(MANUAL_EXPEDITION_PREFIX):
        if not command.expedition:
            raise ValidationError({"expedition": [f"Required for {MANUAL_EXPEDITION_PREFIX} trackings"]})
        return command.expedition, command.expedition_color, command.expedition_slug

    matched = current_domain.repository_for(Expedition).match_tracking(tracking)
    if matched is None:
        raise ValidationError({"tracking": ["Tracking does not match any known expedition prefix"]})
    return matched.name, matched.color, matched.slug


@fulfillment.command_handler(part_of=Outbound)
class OutboundHandler:
    @handle(RecordOutbound)
    def record_outbound(self, command):
        tracking = normalize_tracking(command.tracking)
        with exclusive_unit_of_work():
            if current_domain.repository_for(Order).find_by_tracking(tracking) is None:
                raise NotFound(f"No order found with tracking '{tracking}'")

            passed_qc = (
                current_domain.repository_for(QcRibbon).find_by_tracking(tracking) is not None
                or current_domain.repository_for(QcOnline).find_by_tracking(tracking) is not None
            )
            if not passed_qc:
                raise ValidationError({"tracking": ["Tracking must pass QC (ribbon or online) before outbound"]})

            repo = current_domain.repository_for(Outbound)
            if repo.find_by_tracking(tracking) is not None:
                raise Conflict(f"An outbound for tracking '{tracking}' already exists")

            expedition, color, slug = _expedition_for(tracking, command)
            outbound = Outbound(
                tracking=tracking,
                outbound_by=str(command.actor_id),
                expedition=expedition,
                expedition_color=color,
                expedition_slug=slug,
                created_at=datetime.now(UTC),
            )
            repo.add(outbound)

        logger.info("Outbound recorded", tracking=tracking, expedition=expedition)
        return str(outbound.id)
