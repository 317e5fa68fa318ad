"""Fulfillment bounded context: warehouse order processing.

Owns the order state machine (intake, picking, editing, cancellation,
duplication), the QC and outbound records keyed by tracking number, the
complaints and returns filed against dispatched parcels, and the read-side
tracking-flow reconstruction that stitches the stages together.
"""

from protean.domain import Domain
from shared.authorization import DEFAULT_ROLE_RANKS, AuthorizationGuard, RoleHierarchy

from fulfillment.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
fulfillment = Domain(name="fulfillment")

# Built once per process and passed by reference to the handlers
guard = AuthorizationGuard(RoleHierarchy(DEFAULT_ROLE_RANKS))
