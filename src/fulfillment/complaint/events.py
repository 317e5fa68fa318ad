"""Complaint domain events."""

from protean.fields import Boolean, DateTime, Identifier, Integer, String

from fulfillment.domain import fulfillment


@fulfillment.event(part_of="Complaint")
class ComplaintFiled:
    """A customer complaint was opened against a dispatched parcel."""

    __version__ = 1

    complaint_id = Identifier(required=True)
    code = String(required=True)
    tracking = String(required=True)
    order_id = Identifier(required=True)
    filed_by = Identifier(required=True)
    filed_at = DateTime(required=True)


@fulfillment.event(part_of="Complaint")
class ComplaintResolved:
    __version__ = 1

    complaint_id = Identifier(required=True)
    total_fee = Integer(required=True)
    operator_count = Integer(required=True)
    resolved_by = Identifier(required=True)
    resolved_at = DateTime(required=True)


@fulfillment.event(part_of="Complaint")
class ComplaintChecked:
    __version__ = 1

    complaint_id = Identifier(required=True)
    checked = Boolean(required=True)
    checked_by = Identifier(required=True)
    checked_at = DateTime(required=True)
