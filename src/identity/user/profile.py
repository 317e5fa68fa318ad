"""Profile edits. Peers may edit each other; only higher ranks are off limits."""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain
from shared.authorization import ActingUser
from shared.errors import Conflict

from identity.domain import guard, identity, logger
from identity.user.user import User


@identity.command(part_of="User")
class UpdateUserProfile:
    user_id = Identifier(required=True)
    full_name = String(max_length=255)
    email = String(max_length=255)
    actor_id = Identifier(required=True)
    actor_roles = Text()


@identity.command_handler(part_of=User)
class ProfileHandler:
    @handle(UpdateUserProfile)
    def update_profile(self, command):
        actor = ActingUser.from_command(command)
        repo = current_domain.repository_for(User)
        user = repo.get_active(command.user_id)
        guard.require_edit_profile(actor, user.role_names())

        if command.email and command.email != user.email:
            other = repo.find_by_email(command.email)
            if other is not None and str(other.id) != str(user.id):
                raise Conflict(f"Email '{command.email}' is already registered")

        user.update_profile(actor.id, full_name=command.full_name, email=command.email)
        repo.add(user)

        logger.info("User profile updated", user_id=str(user.id), actor_id=actor.id)
        return str(user.id)
