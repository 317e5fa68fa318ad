"""Tracking-flow reconstruction: a read-only, chronological view of one parcel.

QC, outbound and order records share no foreign key, only an equal tracking
string. A flow is rebuilt by looking up each family in a fixed stage order:

    QC (ribbon or online)  →  Outbound  →  Order

The QC family is the anchor. A single lookup without a QC record is NotFound,
and listings enumerate QC trackings only, so a parcel with outbound or order
data but no QC record never shows up. Missing secondary stages are simply
left empty.
"""

from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from enum import Enum

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain
from shared.errors import NotFound

from fulfillment.order.order import Order, normalize_tracking
from fulfillment.outbound.outbound import Outbound
from fulfillment.qc.qc import QcOnline, QcRibbon

MAX_PAGE_SIZE = 100


class FlowKind(Enum):
    RIBBON = "ribbon"
    ONLINE = "online"


_ANCHORS = {
    FlowKind.RIBBON: QcRibbon,
    FlowKind.ONLINE: QcOnline,
}


@dataclass(frozen=True)
class QcStage:
    operator_id: str
    created_at: datetime


@dataclass(frozen=True)
class OutboundStage:
    operator_id: str
    expedition: str | None
    expedition_color: str | None
    created_at: datetime


@dataclass(frozen=True)
class OrderStage:
    order_id: str
    tracking: str
    order_ginee_id: str
    complained: bool
    created_at: datetime | None


@dataclass(frozen=True)
class FlowSnapshot:
    tracking: str
    kind: FlowKind
    qc: QcStage | None = None
    outbound: OutboundStage | None = None
    order: OrderStage | None = None

    @property
    def stages(self) -> list[str]:
        """Names of the stages that were found, in stage order."""
        found = [("qc", self.qc), ("outbound", self.outbound), ("order", self.order)]
        return [name for name, stage in found if stage is not None]


def day_bounds(start: date | None, end: date | None) -> tuple[datetime | None, datetime | None]:
    """Inclusive calendar days to a half-open UTC interval ``[lower, upper)``."""
    lower = datetime.combine(start, time.min, tzinfo=UTC) if start else None
    upper = datetime.combine(end + timedelta(days=1), time.min, tzinfo=UTC) if end else None
    return lower, upper


class TrackingFlowReconstructor:
    """Stitches QC, outbound and order records together by tracking number."""

    def reconstruct(self, tracking: str, kind: FlowKind) -> FlowSnapshot:
        tracking = normalize_tracking(tracking)
        anchor = self._anchor_repo(kind).find_by_tracking(tracking)
        if anchor is None:
            raise NotFound(f"No {kind.value} QC record for tracking '{tracking}'")
        return self._snapshot(anchor, kind)

    def list_flows(
        self,
        kind: FlowKind,
        start_date: date | None = None,
        end_date: date | None = None,
        search: str | None = None,
        page: int = 1,
        page_size: int = 10,
    ) -> tuple[list[FlowSnapshot], int]:
        """One page of flows, ordered by tracking, plus the total anchor count.

        Date and search filters apply to the QC records only; secondary stages
        are fetched per tracking afterwards.
        """
        if page < 1:
            raise ValidationError({"page": ["Page must be 1 or greater"]})
        if not 1 <= page_size <= MAX_PAGE_SIZE:
            raise ValidationError({"page_size": [f"Page size must be between 1 and {MAX_PAGE_SIZE}"]})

        query = self._anchor_repo(kind)._dao.query
        lower, upper = day_bounds(start_date, end_date)
        if lower is not None:
            query = query.filter(created_at__gte=lower)
        if upper is not None:
            query = query.filter(created_at__lt=upper)
        if search:
            query = query.filter(tracking__icontains=search.strip())

        results = query.order_by("tracking").offset((page - 1) * page_size).limit(page_size).all()

        # Anchor trackings are unique per family; dedupe anyway so a page never repeats a parcel
        anchors = {}
        for record in results.items:
            if record.tracking:
                anchors.setdefault(record.tracking, record)

        return [self._snapshot(anchor, kind) for anchor in anchors.values()], results.total

    # -------------------------------------------------------------------
    # Stage lookups
    # -------------------------------------------------------------------
    @staticmethod
    def _anchor_repo(kind: FlowKind):
        return current_domain.repository_for(_ANCHORS[kind])

    def _snapshot(self, anchor, kind: FlowKind) -> FlowSnapshot:
        tracking = anchor.tracking
        return FlowSnapshot(
            tracking=tracking,
            kind=kind,
            qc=QcStage(operator_id=str(anchor.qc_by), created_at=anchor.created_at),
            outbound=self._outbound_stage(tracking),
            order=self._order_stage(tracking),
        )

    @staticmethod
    def _outbound_stage(tracking: str) -> OutboundStage | None:
        outbound = current_domain.repository_for(Outbound).find_by_tracking(tracking)
        if outbound is None:
            return None
        return OutboundStage(
            operator_id=str(outbound.outbound_by),
            expedition=outbound.expedition,
            expedition_color=outbound.expedition_color,
            created_at=outbound.created_at,
        )

    @staticmethod
    def _order_stage(tracking: str) -> OrderStage | None:
        order = current_domain.repository_for(Order).find_by_tracking(tracking)
        if order is None:
            return None
        return OrderStage(
            order_id=str(order.id),
            tracking=order.tracking,
            order_ginee_id=order.order_ginee_id,
            complained=bool(order.complained),
            created_at=order.created_at,
        )
