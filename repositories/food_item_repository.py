"""
Food Item Repository - Data access layer for inventory reads
"""

from typing import List, Optional, Tuple
from datetime import date
from sqlalchemy.orm import Session
from sqlalchemy import and_

from repositories.base import BaseRepository
from domain.models import FoodItem, User


class FoodItemRepository(BaseRepository[FoodItem]):
    """Repository for food item data access"""

    def __init__(self, db: Session):
        super().__init__(db, FoodItem)

    def get_expiring_between(
        self, start: date, end: date, user_id: Optional[int] = None
    ) -> List[Tuple[FoodItem, User]]:
        """
        Get items with start <= expiry_date <= end, joined with their owner.

        Rows are ordered by user id, then expiry date ascending.

        Args:
            start: first day of the window (inclusive)
            end: last day of the window (inclusive)
            user_id: restrict to a single owner when given

        Returns:
            List of (FoodItem, User) tuples
        """
        query = (
            self.db.query(FoodItem, User)
            .join(User, FoodItem.user_id == User.id)
            .filter(
                and_(
                    FoodItem.expiry_date >= start,
                    FoodItem.expiry_date <= end,
                )
            )
        )
        if user_id is not None:
            query = query.filter(FoodItem.user_id == user_id)
        return query.order_by(User.id, FoodItem.expiry_date, FoodItem.id).all()

    def get_expiring_on(self, user_id: int, day: date) -> List[FoodItem]:
        """Get a user's items whose expiry date is exactly `day`"""
        return (
            self.db.query(FoodItem)
            .filter(
                and_(
                    FoodItem.user_id == user_id,
                    FoodItem.expiry_date == day,
                )
            )
            .order_by(FoodItem.expiry_date, FoodItem.id)
            .all()
        )
