"""
Expiry Query Service - selects which users get which items.

Two read-only policies over the inventory and user store:

* soon-window: items expiring between today and today + 2 days, across all
  users (or one user for on-demand requests). Users with no match are absent.
* today-exact: every user, with the items expiring exactly today. Users with
  nothing expiring still get a (empty) group so they receive a confirmation.

Both skip users whose phone number fails validation, logging and continuing.
"""

import logging
from collections import OrderedDict
from datetime import date, timedelta
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import StoreError
from domain.schemas.alert_schemas import ExpiringItem, ExpiryGroup
from repositories import FoodItemRepository, UserRepository
from services.expiry_time import SOON_WINDOW_DAYS
from services.validators import is_valid_phone

logger = logging.getLogger("freshalert.expiry_query")


class ExpiryQueryService:
    def __init__(self, db: Session):
        self.db = db
        self.items = FoodItemRepository(db)
        self.users = UserRepository(db)

    def soon_window_groups(
        self, today: date, user_id: Optional[int] = None
    ) -> List[ExpiryGroup]:
        """
        Group items expiring within [today, today + SOON_WINDOW_DAYS] per user.

        Args:
            today: the current calendar day in the alert timezone
            user_id: scope the query to a single user

        Returns:
            One ExpiryGroup per user with at least one item, ordered by user id;
            items within a group are ordered by expiry date ascending.

        Raises:
            StoreError: the query failed
        """
        end = today + timedelta(days=SOON_WINDOW_DAYS)
        try:
            rows = self.items.get_expiring_between(today, end, user_id=user_id)
        except SQLAlchemyError as exc:
            logger.exception("Soon-window query failed")
            raise StoreError(f"DB error (items): {exc}") from exc

        grouped: Dict[int, ExpiryGroup] = OrderedDict()
        for item, user in rows:
            group = grouped.get(user.id)
            if group is None:
                group = grouped[user.id] = ExpiryGroup(
                    user_id=user.id, name=user.name or "", phone=user.phone or ""
                )
            group.items.append(ExpiringItem.model_validate(item))

        result = []
        for uid, group in grouped.items():
            if not is_valid_phone(group.phone):
                logger.warning("Skipping invalid phone for user %s: %s", uid, group.phone)
                continue
            result.append(group)
        return result

    def today_exact_groups(self, today: date) -> List[ExpiryGroup]:
        """
        One group per user holding the items that expire exactly today.

        Groups may be empty. Users with an invalid or missing phone are skipped.

        Raises:
            StoreError: the user or item query failed
        """
        try:
            users = self.users.list_all()
        except SQLAlchemyError as exc:
            logger.exception("Error fetching users for daily-today job")
            raise StoreError(f"DB error (users): {exc}") from exc

        if not users:
            logger.info("No users found for daily-today job.")
            return []

        result = []
        for user in users:
            if not is_valid_phone(user.phone):
                logger.warning(
                    "Skipping user %s - invalid/missing phone: %s", user.id, user.phone
                )
                continue
            try:
                items = self.items.get_expiring_on(user.id, today)
            except SQLAlchemyError as exc:
                logger.exception("Today-exact query failed for user %s", user.id)
                raise StoreError(f"DB error (items): {exc}") from exc
            result.append(
                ExpiryGroup(
                    user_id=user.id,
                    name=user.name or "",
                    phone=user.phone,
                    items=[ExpiringItem.model_validate(i) for i in items],
                )
            )
        return result

    def get_user(self, user_id: int):
        """Look up the recipient for on-demand requests"""
        try:
            return self.users.get_by_id(user_id)
        except SQLAlchemyError as exc:
            logger.exception("User lookup failed for %s", user_id)
            raise StoreError(f"DB error (user): {exc}") from exc
