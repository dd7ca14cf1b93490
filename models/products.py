from core.database import Base
from sqlalchemy import (Column, Integer, String, Text, ForeignKey, Numeric)
from sqlalchemy.orm import relationship
from .mixins import CreatedAtMixin, UpdatedAtMixin

# Products above this stock level are listed as active
ACTIVE_STOCK_THRESHOLD = 10


class Product(Base, CreatedAtMixin, UpdatedAtMixin):
    __tablename__ = "products"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)

    #relationships
    category = relationship("Category", back_populates="products")
    images = relationship("ProductImage", back_populates="product",
                          order_by="ProductImage.sort_order", cascade="all, delete-orphan")
    sales = relationship("Sale", back_populates="product", cascade="all, delete-orphan")
    cart_items = relationship("CartItem", back_populates="product", cascade="all, delete-orphan")
    favorites = relationship("Favorite", back_populates="product", cascade="all, delete-orphan")
    order_items = relationship("OrderItem", back_populates="product")

    name = Column(String(255), nullable=False)
    description = Column(Text)
    price = Column(Numeric(10, 2), nullable=False)
    stock = Column(Integer, default=0, nullable=False)
    status = Column(String(20), default="inactive", nullable=False)

    @staticmethod
    def status_for_stock(stock: int) -> str:
        return "active" if stock > ACTIVE_STOCK_THRESHOLD else "inactive"

    @property
    def primary_image(self):
        for image in self.images:
            if image.is_primary:
                return image.image_url
        return None
