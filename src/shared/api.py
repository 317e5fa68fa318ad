"""FastAPI plumbing shared by both routers.

The acting user is resolved from the ``X-Actor-Id`` and ``X-Actor-Roles``
headers populated by the authentication gateway in front of this service.
"""

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers as register_protean_handlers

from shared.authorization import ActingUser, AuthorizationGuard
from shared.errors import FulfillmentError


def acting_user(
    x_actor_id: str | None = Header(None),
    x_actor_roles: str = Header(""),
) -> ActingUser:
    if not x_actor_id:
        raise HTTPException(status_code=401, detail="Missing acting user")
    roles = frozenset(role.strip() for role in x_actor_roles.split(",") if role.strip())
    return ActingUser(id=x_actor_id, roles=roles)


def require_roles(*allowed: str):
    """Dependency that admits only actors holding one of ``allowed``."""

    def _dependency(actor: ActingUser = Depends(acting_user)) -> ActingUser:
        if not AuthorizationGuard.has_any_role(actor, allowed):
            raise HTTPException(
                status_code=403,
                detail=f"Requires one of the roles: {', '.join(allowed)}",
            )
        return actor

    return _dependency


# ---------------------------------------------------------------------------
# Exception mapping
# ---------------------------------------------------------------------------
async def _fulfillment_error_handler(request: Request, exc: FulfillmentError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def _validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "ValidationFailed", "detail": exc.messages})


async def _object_not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": "NotFound", "detail": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    """Install Protean's handlers, then pin this service's status codes."""
    register_protean_handlers(app)
    app.add_exception_handler(FulfillmentError, _fulfillment_error_handler)
    app.add_exception_handler(ValidationError, _validation_error_handler)
    app.add_exception_handler(ObjectNotFoundError, _object_not_found_handler)
