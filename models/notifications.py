from core.database import Base
from sqlalchemy import (Column, Integer, String, Text, Boolean, ForeignKey)
from sqlalchemy.orm import relationship
from .mixins import CreatedAtMixin, UpdatedAtMixin

NOTIFICATION_TYPES = ("favorite", "cart", "order", "order_status", "sale")


class Notification(Base, CreatedAtMixin, UpdatedAtMixin):
    __tablename__ = "notifications"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    #relationships
    user = relationship("User", back_populates="notifications")

    type = Column(String(20), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    product_id = Column(Integer, nullable=True)
    product_name = Column(String(255), nullable=True)
    order_id = Column(Integer, nullable=True)
