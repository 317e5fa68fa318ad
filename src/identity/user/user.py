"""User aggregate with its role grants.

A user's effective rank is the highest rank among the roles it holds; the
AuthorizationGuard compares effective ranks, so this aggregate only exposes
the role names. Users are never hard-deleted.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, HasMany, Identifier, String
from shared.errors import Conflict, NotFound
from werkzeug.security import check_password_hash, generate_password_hash

from identity.domain import identity
from identity.user.events import (
    PasswordReset,
    RoleGranted,
    RoleRevoked,
    UserCreated,
    UserDeleted,
    UserProfileUpdated,
    UserStatusChanged,
)

MIN_PASSWORD_LENGTH = 6


@identity.entity(part_of="User")
class UserRole:
    """A grant of one role, recording who granted it and when."""

    role_id = Identifier(required=True)
    role_name = String(required=True, max_length=50)
    assigned_by = Identifier()
    assigned_at = DateTime()


@identity.aggregate
class User:
    username = String(required=True, max_length=50)
    email = String(required=True, max_length=255)
    full_name = String(max_length=255)
    password_hash = String(max_length=255)
    is_active = Boolean(default=True)
    is_deleted = Boolean(default=False)
    deleted_by = Identifier()
    deleted_at = DateTime()
    roles = HasMany(UserRole)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def register(
        cls,
        username: str,
        email: str,
        password: str,
        full_name: str | None = None,
        created_by: str | None = None,
    ) -> "User":
        now = datetime.now(UTC)
        user = cls(
            username=username,
            email=email,
            full_name=full_name,
            is_active=True,
            is_deleted=False,
            created_at=now,
            updated_at=now,
        )
        user._hash_password(password)
        user.raise_(
            UserCreated(
                user_id=str(user.id),
                username=username,
                email=email,
                created_by=created_by,
                created_at=now,
            )
        )
        return user

    # -------------------------------------------------------------------
    # Roles
    # -------------------------------------------------------------------
    def role_names(self) -> frozenset[str]:
        return frozenset(grant.role_name for grant in self.roles or [])

    def holds(self, role_name: str) -> bool:
        return role_name in self.role_names()

    def grant(self, role_id: str, role_name: str, assigned_by: str) -> None:
        if self.holds(role_name):
            raise Conflict(f"User already holds role '{role_name}'")

        now = datetime.now(UTC)
        self.add_roles(
            UserRole(
                role_id=role_id,
                role_name=role_name,
                assigned_by=assigned_by,
                assigned_at=now,
            )
        )
        self.updated_at = now
        self.raise_(
            RoleGranted(
                user_id=str(self.id),
                role_name=role_name,
                assigned_by=assigned_by,
                assigned_at=now,
            )
        )

    def revoke(self, role_name: str, revoked_by: str) -> None:
        grant = next((g for g in self.roles or [] if g.role_name == role_name), None)
        if grant is None:
            raise NotFound(f"User does not hold role '{role_name}'")

        now = datetime.now(UTC)
        self.remove_roles(grant)
        self.updated_at = now
        self.raise_(
            RoleRevoked(
                user_id=str(self.id),
                role_name=role_name,
                revoked_by=revoked_by,
                revoked_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Account
    # -------------------------------------------------------------------
    def soft_delete(self, deleted_by: str) -> None:
        now = datetime.now(UTC)
        for grant in list(self.roles or []):
            self.remove_roles(grant)
        self.is_deleted = True
        self.is_active = False
        self.deleted_by = deleted_by
        self.deleted_at = now
        self.updated_at = now
        self.raise_(UserDeleted(user_id=str(self.id), deleted_by=deleted_by, deleted_at=now))

    def reset_password(self, new_password: str, reset_by: str) -> None:
        now = datetime.now(UTC)
        self._hash_password(new_password)
        self.updated_at = now
        self.raise_(PasswordReset(user_id=str(self.id), reset_by=reset_by, reset_at=now))

    def check_password(self, password: str) -> bool:
        return bool(self.password_hash) and check_password_hash(self.password_hash, password)

    def update_profile(self, updated_by: str, full_name: str | None = None, email: str | None = None) -> None:
        now = datetime.now(UTC)
        if full_name is not None:
            self.full_name = full_name
        if email is not None:
            self.email = email
        self.updated_at = now
        self.raise_(UserProfileUpdated(user_id=str(self.id), updated_by=updated_by, updated_at=now))

    def set_active(self, is_active: bool, changed_by: str) -> None:
        now = datetime.now(UTC)
        self.is_active = is_active
        self.updated_at = now
        self.raise_(
            UserStatusChanged(
                user_id=str(self.id),
                is_active=is_active,
                changed_by=changed_by,
                changed_at=now,
            )
        )

    def _hash_password(self, password: str) -> None:
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError({"password": [f"Password must be at least {MIN_PASSWORD_LENGTH} characters"]})
        self.password_hash = generate_password_hash(password)
