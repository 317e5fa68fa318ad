"""Complaint aggregate: a customer complaint about a dispatched parcel.

A complaint is filed once per tracking number. It snapshots the order's lines
and the operators who handled the parcel at each stage, so the resolution can
charge a fee to each of them. Filing also raises the order's complaint flag.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, HasMany, Identifier, Integer, String, Text
from protean.utils.query import Q

from fulfillment.complaint.events import ComplaintChecked, ComplaintFiled, ComplaintResolved
from fulfillment.domain import fulfillment

CODE_PREFIX = "CMP"


@fulfillment.entity(part_of="Complaint")
class ComplaintLine:
    sku = String(required=True, max_length=100)
    product_name = String(required=True, max_length=255)
    variant = String(max_length=255)
    quantity = Integer(required=True, min_value=1)


@fulfillment.entity(part_of="Complaint")
class ComplaintOperator:
    """An operator held responsible for part of the complaint fee."""

    operator_id = Identifier(required=True)
    stage = String(max_length=50)
    fee_charge = Integer(default=0, min_value=0)


@fulfillment.aggregate
class Complaint:
    code = String(required=True, max_length=50)
    tracking = String(required=True, max_length=100)
    order_id = Identifier(required=True)
    order_ginee_id = String(max_length=100)
    channel = String(max_length=100)
    store = String(max_length=255)
    description = Text(required=True)
    solution = Text()
    total_fee = Integer(default=0, min_value=0)
    checked = Boolean(default=False)
    lines = HasMany(ComplaintLine)
    operators = HasMany(ComplaintOperator)

    created_by = Identifier(required=True)
    resolved_by = Identifier()
    resolved_at = DateTime()
    checked_by = Identifier()
    checked_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def file(cls, code: str, order, description: str, created_by: str, operators: list[tuple[str, str]]) -> "Complaint":
        """Open a complaint for ``order``; ``operators`` holds (stage, operator id) pairs."""
        now = datetime.now(UTC)
        complaint = cls(
            code=code,
            tracking=order.tracking,
            order_id=str(order.id),
            order_ginee_id=order.order_ginee_id,
            channel=order.channel,
            store=order.store,
            description=description,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        for detail in order.details or []:
            complaint.add_lines(
                ComplaintLine(
                    sku=detail.sku,
                    product_name=detail.product_name,
                    variant=detail.variant,
                    quantity=detail.quantity,
                )
            )
        for stage, operator_id in operators:
            complaint.add_operators(ComplaintOperator(operator_id=operator_id, stage=stage))

        complaint.raise_(
            ComplaintFiled(
                complaint_id=str(complaint.id),
                code=code,
                tracking=complaint.tracking,
                order_id=complaint.order_id,
                filed_by=created_by,
                filed_at=now,
            )
        )
        return complaint

    def resolve(self, solution: str, total_fee: int, charges: list[dict], resolved_by: str) -> None:
        """Record the solution. A non-empty ``charges`` list replaces the operators."""
        if total_fee is not None and total_fee < 0:
            raise ValidationError({"total_fee": ["Total fee cannot be negative"]})

        now = datetime.now(UTC)
        self.solution = solution
        self.total_fee = total_fee or 0
        if charges:
            for operator in list(self.operators or []):
                self.remove_operators(operator)
            for charge in charges:
                self.add_operators(
                    ComplaintOperator(
                        operator_id=charge.get("operator_id"),
                        stage=charge.get("stage"),
                        fee_charge=charge.get("fee_charge") or 0,
                    )
                )
        self.resolved_by = resolved_by
        self.resolved_at = now
        self.updated_at = now
        self.raise_(
            ComplaintResolved(
                complaint_id=str(self.id),
                total_fee=self.total_fee,
                operator_count=len(self.operators or []),
                resolved_by=resolved_by,
                resolved_at=now,
            )
        )

    def mark_checked(self, checked: bool, checked_by: str) -> None:
        now = datetime.now(UTC)
        self.checked = checked
        self.checked_by = checked_by
        self.checked_at = now
        self.updated_at = now
        self.raise_(ComplaintChecked(complaint_id=str(self.id), checked=checked, checked_by=checked_by, checked_at=now))


def complaint_code(day: datetime, sequence: int) -> str:
    """``CMP`` + yymmdd + a four-digit running number for that day."""
    return f"{CODE_PREFIX}{day:%y%m%d}{sequence:04d}"


@fulfillment.repository(part_of=Complaint)
class ComplaintRepository:
    def find_by_tracking(self, tracking: str) -> Complaint | None:
        return self._dao.query.filter(tracking=tracking).all().first

    def count_with_code_prefix(self, prefix: str) -> int:
        return self._dao.query.filter(code__startswith=prefix).all().total

    def page(
        self,
        created_from: datetime | None = None,
        created_before: datetime | None = None,
        search: str | None = None,
        page: int = 1,
        page_size: int = 10,
    ) -> tuple[list[Complaint], int]:
        """Newest codes first. ``search`` matches code, tracking or external order id."""
        query = self._dao.query
        if created_from is not None:
            query = query.filter(created_at__gte=created_from)
        if created_before is not None:
            query = query.filter(created_at__lt=created_before)
        if search:
            term = search.strip()
            query = query.filter(
                Q(code__icontains=term) | Q(tracking__icontains=term) | Q(order_ginee_id__icontains=term)
            )
        results = query.order_by("-code").offset((page - 1) * page_size).limit(page_size).all()
        return results.items, results.total
