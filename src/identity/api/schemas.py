"""Pydantic API schemas for the Identity domain."""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------
class CreateUserRequest(BaseModel):
    username: str
    email: str
    full_name: str | None = None
    password: str = Field(min_length=6)
    role: str | None = None


class AssignRoleRequest(BaseModel):
    role_name: str


class ResetPasswordRequest(BaseModel):
    new_password: str = Field(min_length=6)


class UpdateUserStatusRequest(BaseModel):
    is_active: bool


class UpdateUserProfileRequest(BaseModel):
    full_name: str | None = None
    email: str | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class UserIdResponse(BaseModel):
    user_id: str


class UserRoleResponse(BaseModel):
    role_id: str
    role_name: str
    assigned_by: str | None = None
    assigned_at: datetime | None = None


class UserResponse(BaseModel):
    id: str
    username: str
    email: str
    full_name: str | None = None
    is_active: bool
    effective_rank: int
    roles: list[UserRoleResponse]
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RoleResponse(BaseModel):
    id: str
    name: str
    rank: int
    description: str | None = None


class StatusResponse(BaseModel):
    status: str = "ok"
