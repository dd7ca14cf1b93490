from core.database import Base
from sqlalchemy import (Column, Integer, String, ForeignKey, Numeric)
from sqlalchemy.orm import relationship
from .mixins import CreatedAtMixin

class OrderItem(Base, CreatedAtMixin):
    """
    Snapshot of a purchased product. Name and price are copied at purchase
    time so later product edits never rewrite order history.
    """
    __tablename__ = "order_items"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True)

    #relationships
    order = relationship("Order", back_populates="items")
    product = relationship("Product", back_populates="order_items")

    product_name = Column(String(255), nullable=False)
    product_price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)
