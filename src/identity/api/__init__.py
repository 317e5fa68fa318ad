"""Identity domain API package."""

from identity.api.routes import role_router, user_router

__all__ = ["user_router", "role_router"]
