"""Fulfillment domain API package."""

from fulfillment.api.routes import (
    catalogue_router,
    complaint_router,
    flow_router,
    order_router,
    outbound_router,
    qc_router,
    return_router,
)

__all__ = [
    "order_router",
    "qc_router",
    "outbound_router",
    "catalogue_router",
    "complaint_router",
    "return_router",
    "flow_router",
]
