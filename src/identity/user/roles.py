"""Granting and revoking roles.

Check order: the user must exist, then the role, then the grant must be
absent (assign) or present (remove), and only then does the rank check run.
Granting uses ``>=``: an actor may hand out its own rank.
"""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain
from shared.authorization import ActingUser
from shared.errors import Conflict, NotFound

from identity.domain import guard, identity, logger
from identity.role.role import Role
from identity.user.user import User


@identity.command(part_of="User")
class AssignRole:
    user_id = Identifier(required=True)
    role_name = String(required=True, max_length=50)
    actor_id = Identifier(required=True)
    actor_roles = Text()


@identity.command(part_of="User")
class RemoveRole:
    user_id = Identifier(required=True)
    role_name = String(required=True, max_length=50)
    actor_id = Identifier(required=True)
    actor_roles = Text()


def _load(command) -> tuple[User, Role]:
    user = current_domain.repository_for(User).get_active(command.user_id)
    role = current_domain.repository_for(Role).find_by_name(command.role_name)
    if role is None:
        raise NotFound(f"Role '{command.role_name}' not found")
    return user, role


@identity.command_handler(part_of=User)
class RoleGrantHandler:
    @handle(AssignRole)
    def assign_role(self, command):
        actor = ActingUser.from_command(command)
        user, role = _load(command)
        if user.holds(role.name):
            raise Conflict(f"User already holds role '{role.name}'")
        guard.require_assign(actor, role.name)

        user.grant(str(role.id), role.name, assigned_by=actor.id)
        current_domain.repository_for(User).add(user)

        logger.info("Role assigned", user_id=str(user.id), role=role.name, actor_id=actor.id)
        return str(user.id)

    @handle(RemoveRole)
    def remove_role(self, command):
        actor = ActingUser.from_command(command)
        user, role = _load(command)
        if not user.holds(role.name):
            raise NotFound(f"User does not hold role '{role.name}'")
        guard.require_assign(actor, role.name)

        user.revoke(role.name, revoked_by=actor.id)
        current_domain.repository_for(User).add(user)

        logger.info("Role removed", user_id=str(user.id), role=role.name, actor_id=actor.id)
        return str(user.id)
