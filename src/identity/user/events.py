"""User domain events."""

from protean.fields import Boolean, DateTime, Identifier, String

from identity.domain import identity


@identity.event(part_of="User")
class UserCreated:
    __version__ = 1

    user_id = Identifier(required=True)
    username = String(required=True)
    email = String(required=True)
    created_by = Identifier()
    created_at = DateTime(required=True)


@identity.event(part_of="User")
class RoleGranted:
    __version__ = 1

    user_id = Identifier(required=True)
    role_name = String(required=True)
    assigned_by = Identifier(required=True)
    assigned_at = DateTime(required=True)


@identity.event(part_of="User")
class RoleRevoked:
    __version__ = 1

    user_id = Identifier(required=True)
    role_name = String(required=True)
    revoked_by = Identifier(required=True)
    revoked_at = DateTime(required=True)


@identity.event(part_of="User")
class UserDeleted:
    """Soft delete: the record stays, flagged and stripped of its roles."""

    __version__ = 1

    user_id = Identifier(required=True)
    deleted_by = Identifier(required=True)
    deleted_at = DateTime(required=True)


@identity.event(part_of="User")
class PasswordReset:
    __version__ = 1

    user_id = Identifier(required=True)
    reset_by = Identifier(required=True)
    reset_at = DateTime(required=True)


@identity.event(part_of="User")
class UserProfileUpdated:
    __version__ = 1

    user_id = Identifier(required=True)
    updated_by = Identifier(required=True)
    updated_at = DateTime(required=True)


@identity.event(part_of="User")
class UserStatusChanged:
    __version__ = 1

    user_id = Identifier(required=True)
    is_active = Boolean(default=True)
    changed_by = Identifier(required=True)
    changed_at = DateTime(required=True)
