"""Pydantic API schemas for the Fulfillment domain.

These are the external API contracts, separate from domain commands.
The API layer translates between these schemas and domain commands.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------
class OrderDetailRequest(BaseModel):
    id: str | None = None  # omitted, null or "0" inserts a new detail
    sku: str
    product_name: str
    variant: str | None = None
    quantity: int = Field(ge=1)
    price: int = 0


class OrderRowRequest(BaseModel):
    order_ginee_id: str
    tracking: str
    channel: str | None = None
    store: str | None = None
    buyer: str | None = None
    address: str | None = None
    courier: str | None = None
    sent_before: datetime | None = None
    details: list[OrderDetailRequest]


class BulkCreateOrdersRequest(BaseModel):
    orders: list[OrderRowRequest]


class UpdateOrderRequest(BaseModel):
    channel: str | None = None
    store: str | None = None
    buyer: str | None = None
    address: str | None = None
    courier: str | None = None
    tracking: str | None = None
    sent_before: datetime | None = None
    details: list[OrderDetailRequest]


class AssignPickerRequest(BaseModel):
    picker_id: str


class MarkComplainedRequest(BaseModel):
    complained: bool = True


class RecordQcRequest(BaseModel):
    tracking: str


class RecordOutboundRequest(BaseModel):
    tracking: str
    expedition: str | None = None
    expedition_color: str | None = None
    expedition_slug: str | None = None


class FileComplaintRequest(BaseModel):
    tracking: str
    description: str


class ComplaintChargeRequest(BaseModel):
    operator_id: str
    stage: str | None = None
    fee_charge: int = Field(0, ge=0)


class ResolveComplaintRequest(BaseModel):
    solution: str
    total_fee: int = Field(0, ge=0)
    operators: list[ComplaintChargeRequest] = []  # empty keeps the operators gathered at filing


class CheckComplaintRequest(BaseModel):
    checked: bool = True


class RecordReturnRequest(BaseModel):
    new_tracking: str
    old_tracking: str
    return_type: str
    return_reason: str
    return_number: str | None = None
    scrap_number: str | None = None


class UpdateReturnRequest(BaseModel):
    return_number: str | None = None
    scrap_number: str | None = None


class RegisterProductRequest(BaseModel):
    sku: str
    name: str
    image: str | None = None
    variant: str | None = None
    location: str | None = None
    barcode: str | None = None


class RegisterExpeditionRequest(BaseModel):
    code: str
    name: str
    slug: str
    color: str | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class BulkCreateSummary(BaseModel):
    total: int
    created: int
    skipped: int
    failed: int


class ProductSummary(BaseModel):
    sku: str
    name: str
    image: str | None = None
    variant: str | None = None
    location: str | None = None
    barcode: str | None = None


class OrderDetailResponse(BaseModel):
    id: str
    sku: str
    product_name: str
    variant: str | None = None
    quantity: int
    price: int | None = None
    product: ProductSummary | None = None


class OrderResponse(BaseModel):
    id: str
    order_ginee_id: str
    tracking: str
    processing_status: str
    event_status: str | None = None
    channel: str | None = None
    store: str | None = None
    buyer: str | None = None
    address: str | None = None
    courier: str | None = None
    sent_before: datetime | None = None
    assigned_by: str | None = None
    assigned_at: datetime | None = None
    picked_by: str | None = None
    picked_at: datetime | None = None
    pending_by: str | None = None
    pending_at: datetime | None = None
    changed_by: str | None = None
    changed_at: datetime | None = None
    cancelled_by: str | None = None
    cancelled_at: datetime | None = None
    complained: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    details: list[OrderDetailResponse]


class DuplicateOrderResponse(BaseModel):
    original: OrderResponse
    duplicate: OrderResponse


class RecordIdResponse(BaseModel):
    id: str


class QcStageResponse(BaseModel):
    operator_id: str
    created_at: datetime


class OutboundStageResponse(BaseModel):
    operator_id: str
    expedition: str | None = None
    expedition_color: str | None = None
    created_at: datetime


class OrderStageResponse(BaseModel):
    order_id: str
    tracking: str
    order_ginee_id: str
    complained: bool
    created_at: datetime | None = None


class FlowResponse(BaseModel):
    tracking: str
    kind: str
    stages: list[str]
    qc: QcStageResponse | None = None
    outbound: OutboundStageResponse | None = None
    order: OrderStageResponse | None = None


class FlowListResponse(BaseModel):
    items: list[FlowResponse]
    total: int
    page: int
    page_size: int


class ParcelLineResponse(BaseModel):
    sku: str
    product_name: str
    variant: str | None = None
    quantity: int


class ComplaintOperatorResponse(BaseModel):
    operator_id: str
    stage: str | None = None
    fee_charge: int = 0


class ComplaintResponse(BaseModel):
    id: str
    code: str
    tracking: str
    order_id: str
    order_ginee_id: str | None = None
    channel: str | None = None
    store: str | None = None
    description: str
    solution: str | None = None
    total_fee: int = 0
    checked: bool = False
    created_by: str
    resolved_by: str | None = None
    resolved_at: datetime | None = None
    checked_by: str | None = None
    checked_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    lines: list[ParcelLineResponse]
    operators: list[ComplaintOperatorResponse]


class ComplaintListResponse(BaseModel):
    items: list[ComplaintResponse]
    total: int
    page: int
    page_size: int


class ReturnResponse(BaseModel):
    id: str
    new_tracking: str
    old_tracking: str
    order_id: str
    order_ginee_id: str | None = None
    channel: str | None = None
    store: str | None = None
    return_type: str
    return_reason: str
    return_number: str | None = None
    scrap_number: str | None = None
    created_by: str
    updated_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    lines: list[ParcelLineResponse]
