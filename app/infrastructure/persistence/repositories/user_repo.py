"""User (agency staff) repository."""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.exceptions import DuplicateRecordException
from app.infrastructure.persistence.models.user import User
from app.infrastructure.persistence.repositories.base import AgencyScopedRepository


class UserRepository(AgencyScopedRepository[User]):
    filterable = frozenset({"role", "is_active"})

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, User)

    async def create_user(self, user: User) -> User:
        """Create a staff user; raises DuplicateRecordException when the email is taken in the agency."""
        try:
            async with self.db.begin_nested():
                return await self.create(user)
        except IntegrityError:
            raise DuplicateRecordException("User", "email")
