from core.database import Base
from sqlalchemy import (Column, Integer, String, DateTime, ForeignKey, Numeric)
from sqlalchemy.orm import relationship
from .mixins import CreatedAtMixin, UpdatedAtMixin

SALE_STATUSES = ("active", "expired")


class Sale(Base, CreatedAtMixin, UpdatedAtMixin):
    """
    A time-boxed discount on one product.

    At most one active sale per product may cover any instant; the
    admission check in SaleService enforces it on create and update.
    """
    __tablename__ = "sales"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)

    #relationships
    product = relationship("Product", back_populates="sales")

    original_price = Column(Numeric(10, 2), nullable=False)
    sale_price = Column(Numeric(10, 2), nullable=False)
    discount_percentage = Column(Numeric(5, 2), nullable=False)
    quantity_available = Column(Integer, nullable=False)
    quantity_sold = Column(Integer, default=0, nullable=False)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    status = Column(String(20), default="active", nullable=False, index=True)
