"""
Food inventory models.
"""

from sqlalchemy import (
    Column,
    Integer,
    Text,
    Date,
    ForeignKey,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import relationship

from domain.models.database import Base


class FoodItem(Base):
    """A perishable item owned by one user"""

    __tablename__ = "food_item"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("app_user.id", ondelete="CASCADE"),
        nullable=False,
    )
    item_name = Column(Text, nullable=False)
    quantity = Column(Integer, nullable=False)
    purchase_date = Column(Date, nullable=False)
    expiry_date = Column(Date, nullable=False)
    category = Column(Text)

    user = relationship("User", back_populates="food_items")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_food_item_quantity_pos"),
        CheckConstraint(
            "expiry_date >= purchase_date", name="ck_food_item_expiry_after_purchase"
        ),
        Index("ix_food_item_user_expiry", "user_id", "expiry_date"),
    )
