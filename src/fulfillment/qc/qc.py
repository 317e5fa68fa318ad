"""QC-stage records. One per tracking number in each family.

These are the anchor records of tracking-flow reconstruction: a tracking
number only appears in a flow listing once its QC record exists.
"""

from protean.fields import DateTime, Identifier, String

from fulfillment.domain import fulfillment


@fulfillment.aggregate
class QcRibbon:
    tracking = String(required=True, max_length=100)
    qc_by = Identifier(required=True)
    created_at = DateTime(required=True)


@fulfillment.aggregate
class QcOnline:
    tracking = String(required=True, max_length=100)
    qc_by = Identifier(required=True)
    created_at = DateTime(required=True)


@fulfillment.repository(part_of=QcRibbon)
class QcRibbonRepository:
    def find_by_tracking(self, tracking: str) -> QcRibbon | None:
        return self._dao.query.filter(tracking=tracking).all().first


@fulfillment.repository(part_of=QcOnline)
class QcOnlineRepository:
    def find_by_tracking(self, tracking: str) -> QcOnline | None:
        return self._dao.query.filter(tracking=tracking).all().first
