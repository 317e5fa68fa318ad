"""Identity bounded context: users, roles and role grants."""

from protean.domain import Domain
from shared.authorization import DEFAULT_ROLE_RANKS, AuthorizationGuard, RoleHierarchy

from identity.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

# Get logger for this module
logger = get_logger(__name__)

# Domain Composition Root
identity = Domain(name="identity")

hierarchy = RoleHierarchy(DEFAULT_ROLE_RANKS)
guard = AuthorizationGuard(hierarchy)
