from core.database import Base
from sqlalchemy.orm import relationship
from sqlalchemy import (Column, Integer, String, Text, ForeignKey, Numeric)
from .mixins import CreatedAtMixin, UpdatedAtMixin

ORDER_STATUSES = ("pending", "confirmed", "processing", "shipped", "delivered", "cancelled")
DELIVERY_METHODS = ("pickup", "delivery")


class Order(Base, CreatedAtMixin, UpdatedAtMixin):
    __tablename__ = "orders"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    #relationships
    user = relationship("User", back_populates="orders")
    items = relationship("OrderItem", back_populates="order",
                         order_by="OrderItem.id", cascade="all, delete-orphan")
    ratings = relationship("OrderRating", back_populates="order", cascade="all, delete-orphan")

    order_number = Column(String(32), unique=True, nullable=False)
    status = Column(String(20), default="pending", nullable=False)
    customer_name = Column(String(255), nullable=False)
    customer_email = Column(String(255), nullable=False)
    customer_phone = Column(String(50), nullable=False)
    customer_address = Column(String(500))
    delivery_method = Column(String(20), nullable=False)
    payment_method = Column(String(50), nullable=False)
    subtotal = Column(Numeric(10, 2), nullable=False)
    delivery_fee = Column(Numeric(10, 2), default=0, nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)
    notes = Column(Text)
