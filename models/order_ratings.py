from core.database import Base
from sqlalchemy import (Column, Integer, String, Text, ForeignKey, UniqueConstraint)
from sqlalchemy.orm import relationship
from .mixins import CreatedAtMixin, UpdatedAtMixin

MAX_RATING_IMAGES = 3


class OrderRating(Base, CreatedAtMixin, UpdatedAtMixin):
    __tablename__ = "order_ratings"
    __table_args__ = (UniqueConstraint("user_id", "order_id", name="uq_rating_user_order"),)

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)

    #relationships
    user = relationship("User", back_populates="ratings")
    order = relationship("Order", back_populates="ratings")
    images = relationship("OrderRatingImage", back_populates="rating",
                          order_by="OrderRatingImage.id", cascade="all, delete-orphan")

    rating = Column(Integer, nullable=False)
    review_text = Column(Text)


class OrderRatingImage(Base, CreatedAtMixin):
    __tablename__ = "order_rating_images"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    order_rating_id = Column(Integer, ForeignKey("order_ratings.id", ondelete="CASCADE"), nullable=False)

    #relationships
    rating = relationship("OrderRating", back_populates="images")

    image_url = Column(String(500), nullable=False)
    image_name = Column(String(255), nullable=False)
    image_size = Column(Integer, nullable=False)
