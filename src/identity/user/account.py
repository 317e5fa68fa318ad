"""Account management: deletion, password reset and activation.

All three use the strict rule: the actor must outrank the target.
"""

from protean import handle
from protean.fields import Boolean, Identifier, String, Text
from protean.utils.globals import current_domain
from shared.authorization import ActingUser
from shared.errors import Forbidden

from identity.domain import guard, identity, logger
from identity.user.user import User


@identity.command(part_of="User")
class DeleteUser:
    user_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_roles = Text()


@identity.command(part_of="User")
class ResetPassword:
    user_id = Identifier(required=True)
    new_password = String(required=True, max_length=128)
    actor_id = Identifier(required=True)
    actor_roles = Text()


@identity.command(part_of="User")
class UpdateUserStatus:
    user_id = Identifier(required=True)
    is_active = Boolean(default=True)
    actor_id = Identifier(required=True)
    actor_roles = Text()


@identity.command_handler(part_of=User)
class AccountHandler:
    @handle(DeleteUser)
    def delete_user(self, command):
        actor = ActingUser.from_command(command)
        repo = current_domain.repository_for(User)
        user = repo.get_active(command.user_id)
        if str(user.id) == actor.id:
            raise Forbidden("Users cannot delete themselves")
        guard.require_manage_user(actor, user.role_names())

        user.soft_delete(deleted_by=actor.id)
        repo.add(user)

        logger.info("User deleted", user_id=str(user.id), actor_id=actor.id)
        return str(user.id)

    @handle(ResetPassword)
    def reset_password(self, command):
        actor = ActingUser.from_command(command)
        repo = current_domain.repository_for(User)
        user = repo.get_active(command.user_id)
        guard.require_manage_user(actor, user.role_names())

        user.reset_password(command.new_password, reset_by=actor.id)
        repo.add(user)

        logger.info("Password reset", user_id=str(user.id), actor_id=actor.id)
        return str(user.id)

    @handle(UpdateUserStatus)
    def update_status(self, command):
        actor = ActingUser.from_command(command)
        repo = current_domain.repository_for(User)
        user = repo.get_active(command.user_id)
        guard.require_manage_user(actor, user.role_names())

        user.set_active(bool(command.is_active), changed_by=actor.id)
        repo.add(user)

        logger.info("User status changed", user_id=str(user.id), is_active=user.is_active, actor_id=actor.id)
        return str(user.id)
