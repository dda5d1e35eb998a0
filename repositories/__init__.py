"""
Repositories package - Data access layer.
"""

from repositories.base import BaseRepository
from repositories.user_repository import UserRepository
from repositories.food_item_repository import FoodItemRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "FoodItemRepository",
]
