"""Role-hierarchy authorization shared by the Identity and Fulfillment contexts.

Roles form a total order by integer rank. Two predicates drive every
permission decision:

    can_assign       actor rank >= target role rank  (grant peers the same rank)
    can_manage_user  actor rank >  target user rank  (no lateral tampering)

The asymmetry is intentional. The hierarchy is an immutable value built once
by each domain composition root and handed to an ``AuthorizationGuard``.
"""

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

import structlog

from shared.errors import Forbidden

logger = structlog.get_logger(__name__)

DEFAULT_ROLE_RANKS = {
    "superadmin": 9,
    "coordinator": 4,
    "admin": 3,
    "admin-retur": 3,
    "finance": 3,
    "picker": 2,
    "outbound": 2,
    "qc-ribbon": 2,
    "qc-online": 2,
    "mb-ribbon": 2,
    "mb-online": 2,
    "packing": 2,
    "guest": 1,
}


class RoleHierarchy:
    """Immutable mapping of role name to rank."""

    def __init__(self, ranks: Mapping[str, int]) -> None:
        for name, rank in ranks.items():
            if not isinstance(rank, int) or rank < 1:
                raise ValueError(f"Role '{name}' must have a positive integer rank")
        self._ranks = MappingProxyType(dict(ranks))

    @property
    def role_names(self) -> tuple[str, ...]:
        return tuple(self._ranks)

    def is_known(self, role_name: str) -> bool:
        return role_name in self._ranks

    def rank(self, role_name: str) -> int:
        """Rank of a single role, 0 when the role is not recognised."""
        return self._ranks.get(role_name, 0)

    def effective_rank(self, role_names: Iterable[str]) -> int:
        """Highest rank among the given roles, 0 when none is recognised."""
        return max((self.rank(name) for name in role_names), default=0)


@dataclass(frozen=True)
class ActingUser:
    """The authenticated caller, resolved once at the request boundary."""

    id: str
    roles: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_command(cls, command) -> "ActingUser":
        """Rebuild the caller from a command's ``actor_id``/``actor_roles`` fields."""
        roles = json.loads(command.actor_roles) if command.actor_roles else []
        return cls(id=str(command.actor_id), roles=frozenset(roles))

    def roles_json(self) -> str:
        return json.dumps(sorted(self.roles))


class AuthorizationGuard:
    def __init__(self, hierarchy: RoleHierarchy) -> None:
        self.hierarchy = hierarchy

    def rank_of(self, actor: ActingUser) -> int:
        return self.hierarchy.effective_rank(actor.roles)

    def can_assign(self, actor: ActingUser, role_name: str) -> bool:
        return self.hierarchy.is_known(role_name) and self.rank_of(actor) >= self.hierarchy.rank(role_name)

    def can_manage_user(self, actor: ActingUser, target_roles: Iterable[str]) -> bool:
        return self.rank_of(actor) > self.hierarchy.effective_rank(target_roles)

    def can_edit_profile(self, actor: ActingUser, target_roles: Iterable[str]) -> bool:
        return self.rank_of(actor) >= self.hierarchy.effective_rank(target_roles)

    def has_rank(self, actor: ActingUser, role_name: str) -> bool:
        """True when the actor ranks at least as high as ``role_name``."""
        return self.rank_of(actor) >= self.hierarchy.rank(role_name)

    @staticmethod
    def has_any_role(actor: ActingUser, allowed: Iterable[str]) -> bool:
        return not actor.roles.isdisjoint(allowed)

    # -------------------------------------------------------------------
    # Raising variants used by command handlers
    # -------------------------------------------------------------------
    def require_assign(self, actor: ActingUser, role_name: str) -> None:
        if not self.can_assign(actor, role_name):
            logger.warning("Role grant denied", actor_id=actor.id, role=role_name)
            raise Forbidden(f"Insufficient rank to grant or revoke role '{role_name}'")

    def require_manage_user(self, actor: ActingUser, target_roles: Iterable[str]) -> None:
        if not self.can_manage_user(actor, target_roles):
            logger.warning("User management denied", actor_id=actor.id)
            raise Forbidden("Cannot manage a user of equal or higher rank")

    def require_edit_profile(self, actor: ActingUser, target_roles: Iterable[str]) -> None:
        if not self.can_edit_profile(actor, target_roles):
            raise Forbidden("Cannot edit the profile of a higher-ranked user")

    def require_rank(self, actor: ActingUser, role_name: str) -> None:
        if not self.has_rank(actor, role_name):
            logger.warning("Rank requirement not met", actor_id=actor.id, required=role_name)
            raise Forbidden(f"Requires {role_name} rank or higher")
