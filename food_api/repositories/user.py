"""
User Repository.
"""

from sqlalchemy import func, select

from food_api.models import User
from .base import BaseRepository


class UserRepository(BaseRepository[User]):
    @property
    def model(self) -> type[User]:
        return User

    def find_by_email(self, email: str) -> User | None:
        return self._db.scalar(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
