"""User creation by a coordinator or above."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain
from shared.authorization import ActingUser
from shared.errors import Conflict

from identity.domain import guard, identity, logger
from identity.role.role import Role
from identity.user.user import User

DEFAULT_ROLE = "guest"


@identity.command(part_of="User")
class CreateUser:
    """Create a user, optionally with an initial role the actor may grant."""

    username = String(required=True, max_length=50)
    email = String(required=True, max_length=255)
    full_name = String(max_length=255)
    password = String(required=True, max_length=128)
    role = String(max_length=50)
    actor_id = Identifier(required=True)
    actor_roles = Text()


@identity.command_handler(part_of=User)
class ProvisioningHandler:
    @handle(CreateUser)
    def create_user(self, command):
        actor = ActingUser.from_command(command)
        repo = current_domain.repository_for(User)
        if repo.find_by_username(command.username) is not None:
            raise Conflict(f"Username '{command.username}' is already taken")
        if repo.find_by_email(command.email) is not None:
            raise Conflict(f"Email '{command.email}' is already registered")

        roles = current_domain.repository_for(Role)
        if command.role:
            role = roles.find_by_name(command.role)
            if role is None:
                raise ValidationError({"role": [f"Unknown role '{command.role}'"]})
            guard.require_assign(actor, role.name)
        else:
            role = roles.find_by_name(DEFAULT_ROLE)

        user = User.register(
            username=command.username,
            email=command.email,
            password=command.password,
            full_name=command.full_name,
            created_by=actor.id,
        )
        if role is not None:
            user.grant(str(role.id), role.name, assigned_by=actor.id)
        repo.add(user)

        logger.info(
            "User created",
            user_id=str(user.id),
            role=role.name if role else None,
            actor_id=actor.id,
        )
        return str(user.id)
