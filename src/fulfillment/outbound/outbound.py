"""Outbound (dispatch) records and the expeditions they are handed to."""

from protean.fields import DateTime, Identifier, String

from fulfillment.domain import fulfillment

MANUAL_EXPEDITION_PREFIX = "TKP0"


@fulfillment.aggregate
class Expedition:
    """A carrier, recognised by the prefix of its tracking numbers."""

    code = String(required=True, max_length=20)
    name = String(required=True, max_length=100)
    slug = String(required=True, max_length=100)
    color = String(max_length=20)


@fulfillment.aggregate
class Outbound:
    tracking = String(required=True, max_length=100)
    outbound_by = Identifier(required=True)
    expedition = String(max_length=100)
    expedition_color = String(max_length=20)
    expedition_slug = String(max_length=100)
    created_at = DateTime(required=True)


@fulfillment.repository(part_of=Expedition)
class ExpeditionRepository:
    def find_by_code(self, code: str) -> Expedition | None:
        return self._dao.query.filter(code=code).all().first

    def match_tracking(self, tracking: str) -> Expedition | None:
        """The first expedition whose code prefixes ``tracking``, longest code first."""
        expeditions = sorted(self._dao.query.all().items, key=lambda exp: len(exp.code), reverse=True)
        return next((exp for exp in expeditions if tracking.startswith(exp.code)), None)


@fulfillment.repository(part_of=Outbound)
class OutboundRepository:
    def find_by_tracking(self, tracking: str) -> Outbound | None:
        return self._dao.query.filter(tracking=tracking).all().first
