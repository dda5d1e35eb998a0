"""
User Repository - Data access layer for alert recipients
"""

from typing import List
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import User


class UserRepository(BaseRepository[User]):
    """Repository for user lookups"""

    def __init__(self, db: Session):
        super().__init__(db, User)

    def list_all(self) -> List[User]:
        """All users, in id order (the today-exact job iterates these)"""
        return self.get_all()
