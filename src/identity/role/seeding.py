"""Seeding Role records for every name the hierarchy knows about."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from identity.domain import hierarchy, identity, logger
from identity.role.role import Role


@identity.command(part_of="Role")
class SeedRoles:
    """Create any missing Role records. Safe to run repeatedly."""

    actor_id = Identifier()


@identity.command_handler(part_of=Role)
class RoleSeedingHandler:
    @handle(SeedRoles)
    def seed_roles(self, command):
        repo = current_domain.repository_for(Role)
        existing = repo.names()

        created = []
        for name in hierarchy.role_names:
            if name in existing:
                continue
            repo.add(Role(name=name, description=f"{name} (rank {hierarchy.rank(name)})"))
            created.append(name)

        logger.info("Roles seeded", created=created)
        return created
