"""FastAPI endpoints for the Identity domain."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain
from shared.api import acting_user, require_roles
from shared.authorization import ActingUser

from identity.api.schemas import (
    AssignRoleRequest,
    CreateUserRequest,
    ResetPasswordRequest,
    RoleResponse,
    StatusResponse,
    UpdateUserProfileRequest,
    UpdateUserStatusRequest,
    UserIdResponse,
    UserResponse,
    UserRoleResponse,
)
from identity.domain import hierarchy
from identity.role.role import Role
from identity.role.seeding import SeedRoles
from identity.user.account import DeleteUser, ResetPassword, UpdateUserStatus
from identity.user.profile import UpdateUserProfile
from identity.user.provisioning import CreateUser
from identity.user.roles import AssignRole, RemoveRole
from identity.user.user import User

# Only these roles reach user and role management at all; rank rules apply after
USER_MANAGERS = ("superadmin", "coordinator")


def _actor_fields(actor: ActingUser) -> dict:
    return {"actor_id": actor.id, "actor_roles": actor.roles_json()}


def _user_response(user: User) -> UserResponse:
    grants = list(user.roles or [])
    return UserResponse(
        id=str(user.id),
        username=user.username,
        email=user.email,
        full_name=user.full_name,
        is_active=user.is_active,
        effective_rank=hierarchy.effective_rank(user.role_names()),
        roles=[
            UserRoleResponse(
                role_id=str(grant.role_id),
                role_name=grant.role_name,
                assigned_by=str(grant.assigned_by) if grant.assigned_by else None,
                assigned_at=grant.assigned_at,
            )
            for grant in grants
        ],
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


# ---------------------------------------------------------------------------
# User Router
# ---------------------------------------------------------------------------
user_router = APIRouter(prefix="/users", tags=["users"])


@user_router.post("", status_code=201, response_model=UserIdResponse)
async def create_user(
    body: CreateUserRequest,
    actor: ActingUser = Depends(require_roles(*USER_MANAGERS)),
) -> UserIdResponse:
    command = CreateUser(
        username=body.username,
        email=body.email,
        full_name=body.full_name,
        password=body.password,
        role=body.role,
        **_actor_fields(actor),
    )
    result = current_domain.process(command, asynchronous=False)
    return UserIdResponse(user_id=result)


@user_router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str) -> UserResponse:
    return _user_response(current_domain.repository_for(User).get_active(user_id))


@user_router.delete("/{user_id}", response_model=StatusResponse)
async def delete_user(
    user_id: str,
    actor: ActingUser = Depends(require_roles(*USER_MANAGERS)),
) -> StatusResponse:
    current_domain.process(DeleteUser(user_id=user_id, **_actor_fields(actor)), asynchronous=False)
    return StatusResponse(status="deleted")


@user_router.put("/{user_id}/password", response_model=StatusResponse)
async def reset_password(
    user_id: str,
    body: ResetPasswordRequest,
    actor: ActingUser = Depends(require_roles(*USER_MANAGERS)),
) -> StatusResponse:
    command = ResetPassword(user_id=user_id, new_password=body.new_password, **_actor_fields(actor))
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="password_reset")


@user_router.put("/{user_id}/status", response_model=UserResponse)
async def update_status(
    user_id: str,
    body: UpdateUserStatusRequest,
    actor: ActingUser = Depends(require_roles(*USER_MANAGERS)),
) -> UserResponse:
    command = UpdateUserStatus(user_id=user_id, is_active=body.is_active, **_actor_fields(actor))
    current_domain.process(command, asynchronous=False)
    return _user_response(current_domain.repository_for(User).get(user_id))


@user_router.put("/{user_id}/profile", response_model=UserResponse)
async def update_profile(
    user_id: str,
    body: UpdateUserProfileRequest,
    actor: ActingUser = Depends(acting_user),
) -> UserResponse:
    command = UpdateUserProfile(
        user_id=user_id,
        full_name=body.full_name,
        email=body.email,
        **_actor_fields(actor),
    )
    current_domain.process(command, asynchronous=False)
    return _user_response(current_domain.repository_for(User).get(user_id))


@user_router.post("/{user_id}/roles", status_code=201, response_model=UserResponse)
async def assign_role(
    user_id: str,
    body: AssignRoleRequest,
    actor: ActingUser = Depends(require_roles(*USER_MANAGERS)),
) -> UserResponse:
    command = AssignRole(user_id=user_id, role_name=body.role_name, **_actor_fields(actor))
    current_domain.process(command, asynchronous=False)
    return _user_response(current_domain.repository_for(User).get(user_id))


@user_router.delete("/{user_id}/roles/{role_name}", response_model=UserResponse)
async def remove_role(
    user_id: str,
    role_name: str,
    actor: ActingUser = Depends(require_roles(*USER_MANAGERS)),
) -> UserResponse:
    command = RemoveRole(user_id=user_id, role_name=role_name, **_actor_fields(actor))
    current_domain.process(command, asynchronous=False)
    return _user_response(current_domain.repository_for(User).get(user_id))


# ---------------------------------------------------------------------------
# Role Router
# ---------------------------------------------------------------------------
role_router = APIRouter(prefix="/roles", tags=["roles"])


@role_router.get("", response_model=list[RoleResponse])
async def list_roles() -> list[RoleResponse]:
    roles = current_domain.repository_for(Role)._dao.query.limit(1000).all().items
    return sorted(
        (
            RoleResponse(id=str(role.id), name=role.name, rank=hierarchy.rank(role.name), description=role.description)
            for role in roles
        ),
        key=lambda role: (-role.rank, role.name),
    )


@role_router.post("/seed", response_model=list[str])
async def seed_roles(actor: ActingUser = Depends(require_roles("superadmin"))) -> list[str]:
    return current_domain.process(SeedRoles(actor_id=actor.id), asynchronous=False)
