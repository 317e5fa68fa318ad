"""Read-side shaping of orders: details enriched with their catalogue product."""

from protean.utils.globals import current_domain

from fulfillment.order.order import Order
from fulfillment.product.product import Product

_ORDER_FIELDS = (
    "order_ginee_id",
    "tracking",
    "processing_status",
    "event_status",
    "channel",
    "store",
    "buyer",
    "address",
    "courier",
    "sent_before",
    "assigned_by",
    "assigned_at",
    "picked_by",
    "picked_at",
    "pending_by",
    "pending_at",
    "changed_by",
    "changed_at",
    "cancelled_by",
    "cancelled_at",
    "complained",
    "created_at",
    "updated_at",
)


def enriched_details(order: Order) -> list[dict]:
    details = list(order.details or [])
    products = current_domain.repository_for(Product).by_sku([detail.sku for detail in details])
    enriched = []
    for detail in details:
        product = products.get(detail.sku)
        enriched.append(
            {
                "id": str(detail.id),
                **detail.snapshot(),
                "product": product.to_summary() if product else None,
            }
        )
    return enriched


def order_view(order: Order) -> dict:
    view = {"id": str(order.id)}
    for field in _ORDER_FIELDS:
        value = getattr(order, field)
        view[field] = str(value) if field.endswith("_by") and value is not None else value
    view["details"] = enriched_details(order)
    return view
