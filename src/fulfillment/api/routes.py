"""FastAPI routes for the Fulfillment domain."""

import json
from dataclasses import asdict
from datetime import date

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain
from shared.api import acting_user, require_roles
from shared.authorization import ActingUser
from shared.errors import NotFound

from fulfillment.api.schemas import (
    AssignPickerRequest,
    BulkCreateOrdersRequest,
    BulkCreateSummary,
    CheckComplaintRequest,
    ComplaintListResponse,
    ComplaintResponse,
    DuplicateOrderResponse,
    FileComplaintRequest,
    FlowListResponse,
    FlowResponse,
    MarkComplainedRequest,
    OrderResponse,
    RecordIdResponse,
    RecordOutboundRequest,
    RecordQcRequest,
    RecordReturnRequest,
    RegisterExpeditionRequest,
    RegisterProductRequest,
    ResolveComplaintRequest,
    ReturnResponse,
    UpdateOrderRequest,
    UpdateReturnRequest,
)
from fulfillment.complaint.complaint import Complaint
from fulfillment.complaint.handling import CheckComplaint, FileComplaint, ResolveComplaint
from fulfillment.flows.reconstruction import FlowKind, FlowSnapshot, TrackingFlowReconstructor, day_bounds
from fulfillment.order.cancellation import CancelOrder
from fulfillment.order.complaints import MarkComplained
from fulfillment.order.duplication import DuplicateOrder
from fulfillment.order.enrichment import order_view
from fulfillment.order.intake import BulkCreateOrders
from fulfillment.order.modification import UpdateOrder
from fulfillment.order.order import Order, normalize_tracking
from fulfillment.order.picking import AssignPicker, CompletePicking, PickOrder, SetPending
from fulfillment.outbound.recording import RecordOutbound, RegisterExpedition
from fulfillment.product.product import RegisterProduct
from fulfillment.qc.recording import RecordQcOnline, RecordQcRibbon
from fulfillment.returns.recording import RecordReturn, UpdateReturn
from fulfillment.returns.returns import Return

# Route-level role membership, mirroring the gateway's RBAC table
COORDINATORS = ("superadmin", "coordinator")
ADMINS = ("superadmin", "admin")
CATALOGUE_EDITORS = ("superadmin", "admin", "coordinator")


def _actor_fields(actor: ActingUser) -> dict:
    return {"actor_id": actor.id, "actor_roles": actor.roles_json()}


def _order_response(order_id: str) -> OrderResponse:
    order = current_domain.repository_for(Order).get(order_id)
    return OrderResponse(**order_view(order))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("/bulk", status_code=201, response_model=BulkCreateSummary)
async def bulk_create_orders(
    body: BulkCreateOrdersRequest,
    actor: ActingUser = Depends(require_roles(*CATALOGUE_EDITORS)),
) -> BulkCreateSummary:
    """Import a batch of orders; existing external ids are skipped."""
    command = BulkCreateOrders(
        orders=json.dumps([row.model_dump(mode="json") for row in body.orders]),
        **_actor_fields(actor),
    )
    summary = current_domain.process(command, asynchronous=False)
    return BulkCreateSummary(**summary)


@order_router.get("/tracking/{tracking}", response_model=OrderResponse)
async def get_order_by_tracking(tracking: str) -> OrderResponse:
    tracking = normalize_tracking(tracking)
    order = current_domain.repository_for(Order).find_by_tracking(tracking)
    if order is None:
        raise NotFound(f"No order found with tracking '{tracking}'")
    return OrderResponse(**order_view(order))


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    return _order_response(order_id)


@order_router.put("/{order_id}", response_model=OrderResponse)
async def update_order(
    order_id: str,
    body: UpdateOrderRequest,
    actor: ActingUser = Depends(require_roles(*ADMINS)),
) -> OrderResponse:
    """Edit header fields and reconcile details by id."""
    command = UpdateOrder(
        order_id=order_id,
        channel=body.channel,
        store=body.store,
        buyer=body.buyer,
        address=body.address,
        courier=body.courier,
        tracking=body.tracking,
        sent_before=body.sent_before,
        details=json.dumps([detail.model_dump() for detail in body.details]),
        **_actor_fields(actor),
    )
    current_domain.process(command, asynchronous=False)
    return _order_response(order_id)


@order_router.put("/{order_id}/assign-picker", response_model=OrderResponse)
async def assign_picker(
    order_id: str,
    body: AssignPickerRequest,
    actor: ActingUser = Depends(require_roles(*COORDINATORS)),
) -> OrderResponse:
    command = AssignPicker(order_id=order_id, picker_id=body.picker_id, **_actor_fields(actor))
    current_domain.process(command, asynchronous=False)
    return _order_response(order_id)


@order_router.put("/{order_id}/pick", response_model=OrderResponse)
async def pick_order(order_id: str, actor: ActingUser = Depends(acting_user)) -> OrderResponse:
    """Self-service pick from the ready or pending pool."""
    current_domain.process(PickOrder(order_id=order_id, **_actor_fields(actor)), asynchronous=False)
    return _order_response(order_id)


@order_router.put("/{order_id}/complete-picking", response_model=OrderResponse)
async def complete_picking(order_id: str, actor: ActingUser = Depends(acting_user)) -> OrderResponse:
    current_domain.process(CompletePicking(order_id=order_id, **_actor_fields(actor)), asynchronous=False)
    return _order_response(order_id)


@order_router.put("/{order_id}/pending", response_model=OrderResponse)
async def set_pending(
    order_id: str,
    actor: ActingUser = Depends(require_roles(*COORDINATORS)),
) -> OrderResponse:
    current_domain.process(SetPending(order_id=order_id, **_actor_fields(actor)), asynchronous=False)
    return _order_response(order_id)


@order_router.put("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: str,
    actor: ActingUser = Depends(require_roles(*ADMINS)),
) -> OrderResponse:
    current_domain.process(CancelOrder(order_id=order_id, **_actor_fields(actor)), asynchronous=False)
    return _order_response(order_id)


@order_router.post("/{order_id}/duplicate", status_code=201, response_model=DuplicateOrderResponse)
async def duplicate_order(
    order_id: str,
    actor: ActingUser = Depends(require_roles(*ADMINS)),
) -> DuplicateOrderResponse:
    result = current_domain.process(DuplicateOrder(order_id=order_id, **_actor_fields(actor)), asynchronous=False)
    return DuplicateOrderResponse(
        original=_order_response(result["original_id"]),
        duplicate=_order_response(result["copy_id"]),
    )


@order_router.put("/{order_id}/complained", response_model=OrderResponse)
async def mark_complained(
    order_id: str,
    body: MarkComplainedRequest,
    actor: ActingUser = Depends(acting_user),
) -> OrderResponse:
    command = MarkComplained(order_id=order_id, complained=body.complained, **_actor_fields(actor))
    current_domain.process(command, asynchronous=False)
    return _order_response(order_id)


# ---------------------------------------------------------------------------
# QC / Outbound Routers
# ---------------------------------------------------------------------------
qc_router = APIRouter(prefix="/qc", tags=["qc"])


@qc_router.post("/ribbon", status_code=201, response_model=RecordIdResponse)
async def record_qc_ribbon(body: RecordQcRequest, actor: ActingUser = Depends(acting_user)) -> RecordIdResponse:
    result = current_domain.process(RecordQcRibbon(tracking=body.tracking, **_actor_fields(actor)), asynchronous=False)
    return RecordIdResponse(id=result)


@qc_router.post("/online", status_code=201, response_model=RecordIdResponse)
async def record_qc_online(body: RecordQcRequest, actor: ActingUser = Depends(acting_user)) -> RecordIdResponse:
    result = current_domain.process(RecordQcOnline(tracking=body.tracking, **_actor_fields(actor)), asynchronous=False)
    return RecordIdResponse(id=result)


outbound_router = APIRouter(prefix="/outbounds", tags=["outbounds"])


@outbound_router.post("", status_code=201, response_model=RecordIdResponse)
async def record_outbound(body: RecordOutboundRequest, actor: ActingUser = Depends(acting_user)) -> RecordIdResponse:
    command = RecordOutbound(
        tracking=body.tracking,
        expedition=body.expedition,
        expedition_color=body.expedition_color,
        expedition_slug=body.expedition_slug,
        **_actor_fields(actor),
    )
    result = current_domain.process(command, asynchronous=False)
    return RecordIdResponse(id=result)


# ---------------------------------------------------------------------------
# Catalogue Router (products and expeditions)
# ---------------------------------------------------------------------------
catalogue_router = APIRouter(tags=["catalogue"])


@catalogue_router.post("/products", status_code=201, response_model=RecordIdResponse)
async def register_product(
    body: RegisterProductRequest,
    actor: ActingUser = Depends(require_roles(*CATALOGUE_EDITORS)),
) -> RecordIdResponse:
    result = current_domain.process(RegisterProduct(**body.model_dump(), **_actor_fields(actor)), asynchronous=False)
    return RecordIdResponse(id=result)


@catalogue_router.post("/expeditions", status_code=201, response_model=RecordIdResponse)
async def register_expedition(
    body: RegisterExpeditionRequest,
    actor: ActingUser = Depends(require_roles(*CATALOGUE_EDITORS)),
) -> RecordIdResponse:
    result = current_domain.process(
        RegisterExpedition(**body.model_dump(), **_actor_fields(actor)),
        asynchronous=False,
    )
    return RecordIdResponse(id=result)


# ---------------------------------------------------------------------------
# Complaint / Return Routers
# ---------------------------------------------------------------------------
complaint_router = APIRouter(prefix="/complaints", tags=["complaints"])


def _complaint_response(complaint_id: str) -> ComplaintResponse:
    return ComplaintResponse(**current_domain.repository_for(Complaint).get(complaint_id).to_dict())


@complaint_router.post("", status_code=201, response_model=ComplaintResponse)
async def file_complaint(body: FileComplaintRequest, actor: ActingUser = Depends(acting_user)) -> ComplaintResponse:
    """Open a complaint for a tracking number and flag its order."""
    command = FileComplaint(tracking=body.tracking, description=body.description, **_actor_fields(actor))
    return _complaint_response(current_domain.process(command, asynchronous=False))


@complaint_router.get("", response_model=ComplaintListResponse)
async def list_complaints(
    start_date: date | None = None,
    end_date: date | None = None,
    search: str | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
) -> ComplaintListResponse:
    created_from, created_before = day_bounds(start_date, end_date)
    complaints, total = current_domain.repository_for(Complaint).page(
        created_from,
        created_before,
        search=search,
        page=page,
        page_size=page_size,
    )
    return ComplaintListResponse(
        items=[ComplaintResponse(**complaint.to_dict()) for complaint in complaints],
        total=total,
        page=page,
        page_size=page_size,
    )


@complaint_router.get("/{complaint_id}", response_model=ComplaintResponse)
async def get_complaint(complaint_id: str) -> ComplaintResponse:
    return _complaint_response(complaint_id)


@complaint_router.put("/{complaint_id}/solution", response_model=ComplaintResponse)
async def resolve_complaint(
    complaint_id: str,
    body: ResolveComplaintRequest,
    actor: ActingUser = Depends(require_roles(*ADMINS)),
) -> ComplaintResponse:
    command = ResolveComplaint(
        complaint_id=complaint_id,
        solution=body.solution,
        total_fee=body.total_fee,
        operators=json.dumps([charge.model_dump() for charge in body.operators]),
        **_actor_fields(actor),
    )
    current_domain.process(command, asynchronous=False)
    return _complaint_response(complaint_id)


@complaint_router.put("/{complaint_id}/check", response_model=ComplaintResponse)
async def check_complaint(
    complaint_id: str,
    body: CheckComplaintRequest,
    actor: ActingUser = Depends(require_roles(*ADMINS)),
) -> ComplaintResponse:
    command = CheckComplaint(complaint_id=complaint_id, checked=body.checked, **_actor_fields(actor))
    current_domain.process(command, asynchronous=False)
    return _complaint_response(complaint_id)


return_router = APIRouter(prefix="/returns", tags=["returns"])


def _return_response(parcel: Return) -> ReturnResponse:
    return ReturnResponse(**parcel.to_dict())


@return_router.post("", status_code=201, response_model=ReturnResponse)
async def record_return(body: RecordReturnRequest, actor: ActingUser = Depends(acting_user)) -> ReturnResponse:
    return_id = current_domain.process(RecordReturn(**body.model_dump(), **_actor_fields(actor)), asynchronous=False)
    return _return_response(current_domain.repository_for(Return).get(return_id))


@return_router.get("/tracking/{tracking}", response_model=ReturnResponse)
async def get_return_by_tracking(tracking: str) -> ReturnResponse:
    tracking = normalize_tracking(tracking)
    parcel = current_domain.repository_for(Return).find_by_new_tracking(tracking)
    if parcel is None:
        raise NotFound(f"No return found with tracking '{tracking}'")
    return _return_response(parcel)


@return_router.get("/{return_id}", response_model=ReturnResponse)
async def get_return(return_id: str) -> ReturnResponse:
    return _return_response(current_domain.repository_for(Return).get(return_id))


@return_router.put("/{return_id}", response_model=ReturnResponse)
async def update_return(
    return_id: str,
    body: UpdateReturnRequest,
    actor: ActingUser = Depends(acting_user),
) -> ReturnResponse:
    command = UpdateReturn(return_id=return_id, **body.model_dump(), **_actor_fields(actor))
    current_domain.process(command, asynchronous=False)
    return _return_response(current_domain.repository_for(Return).get(return_id))


# ---------------------------------------------------------------------------
# Flow Router
# ---------------------------------------------------------------------------
flow_router = APIRouter(prefix="/flows", tags=["flows"])


def _flow_response(snapshot: FlowSnapshot) -> FlowResponse:
    return FlowResponse(
        tracking=snapshot.tracking,
        kind=snapshot.kind.value,
        stages=snapshot.stages,
        qc=asdict(snapshot.qc) if snapshot.qc else None,
        outbound=asdict(snapshot.outbound) if snapshot.outbound else None,
        order=asdict(snapshot.order) if snapshot.order else None,
    )


@flow_router.get("/{kind}", response_model=FlowListResponse)
async def list_flows(
    kind: FlowKind,
    start_date: date | None = None,
    end_date: date | None = None,
    search: str | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
) -> FlowListResponse:
    """Flows anchored on QC records, ordered by tracking."""
    snapshots, total = TrackingFlowReconstructor().list_flows(
        kind,
        start_date=start_date,
        end_date=end_date,
        search=search,
        page=page,
        page_size=page_size,
    )
    return FlowListResponse(
        items=[_flow_response(snapshot) for snapshot in snapshots],
        total=total,
        page=page,
        page_size=page_size,
    )


@flow_router.get("/{kind}/{tracking}", response_model=FlowResponse)
async def get_flow(kind: FlowKind, tracking: str) -> FlowResponse:
    return _flow_response(TrackingFlowReconstructor().reconstruct(tracking, kind))
