"""Warehouse fulfillment FastAPI application.

Multi-domain web server that processes commands synchronously via HTTP.
Each request is wrapped in the correct domain context based on URL prefix.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# Domains are initialized at module level so uvicorn workers share them.
# PROTEAN_ENV controls which config overlay is applied.
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fulfillment.domain import fulfillment  # noqa: E402
from identity.domain import identity  # noqa: E402
from shared.api import register_exception_handlers
from shared.logging import bind_request

identity.init()
fulfillment.init()

# ---------------------------------------------------------------------------
# Route-to-domain mapping
# ---------------------------------------------------------------------------
_ROUTE_DOMAIN_MAP = {
    "/users": identity,
    "/roles": identity,
    "/orders": fulfillment,
    "/qc": fulfillment,
    "/outbounds": fulfillment,
    "/products": fulfillment,
    "/expeditions": fulfillment,
    "/complaints": fulfillment,
    "/returns": fulfillment,
    "/flows": fulfillment,
}


def _resolve_domain(path: str):
    """Return the domain for the given request path, or None."""
    for prefix, domain in _ROUTE_DOMAIN_MAP.items():
        if path.startswith(prefix):
            return domain
    return None


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Warehouse Fulfillment API",
    description="Order fulfillment state machine, role hierarchy and tracking flows",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the correct Protean domain context for each request."""
    bind_request(method=request.method, path=request.url.path, actor_id=request.headers.get("X-Actor-Id"))
    domain = _resolve_domain(request.url.path)
    if domain is not None:
        with domain.domain_context():
            response = await call_next(request)
        return response
    # No domain match: pass through (health check, docs, etc.)
    return await call_next(request)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from fulfillment.api import (  # noqa: E402
    catalogue_router,
    complaint_router,
    flow_router,
    order_router,
    outbound_router,
    qc_router,
    return_router,
)
from identity.api import role_router, user_router  # noqa: E402

app.include_router(user_router)
app.include_router(role_router)
app.include_router(order_router)
app.include_router(qc_router)
app.include_router(outbound_router)
app.include_router(catalogue_router)
app.include_router(complaint_router)
app.include_router(return_router)
app.include_router(flow_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {
                "identity": {"name": identity.name},
                "fulfillment": {"name": fulfillment.name},
            },
        }
    )
