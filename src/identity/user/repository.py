"""Repository for the User aggregate. Soft-deleted users are invisible here."""

from shared.errors import NotFound

from identity.domain import identity
from identity.user.user import User


@identity.repository(part_of=User)
class UserRepository:
    def get_active(self, user_id: str) -> User:
        """Like ``get``, but a soft-deleted user counts as missing."""
        user = self.get(user_id)
        if user.is_deleted:
            raise NotFound(f"User {user_id} not found")
        return user

    def find_by_username(self, username: str) -> User | None:
        return self._dao.query.filter(username=username, is_deleted=False).all().first

    def find_by_email(self, email: str) -> User | None:
        return self._dao.query.filter(email=email, is_deleted=False).all().first
