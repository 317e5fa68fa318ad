"""Role aggregate. Ranks live in the RoleHierarchy, not on the record."""

from protean.fields import String, Text

from identity.domain import identity


@identity.aggregate
class Role:
    name = String(required=True, max_length=50)
    description = Text()


@identity.repository(part_of=Role)
class RoleRepository:
    def find_by_name(self, name: str) -> Role | None:
        return self._dao.query.filter(name=name).all().first

    def names(self) -> set[str]:
        return {role.name for role in self._dao.query.limit(1000).all().items}
