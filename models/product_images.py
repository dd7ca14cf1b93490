from core.database import Base
from sqlalchemy import (Column, Integer, String, Boolean, ForeignKey)
from sqlalchemy.orm import relationship
from .mixins import CreatedAtMixin

PLACEHOLDER_IMAGE = "/placeholder.svg"


class ProductImage(Base, CreatedAtMixin):
    __tablename__ = "product_images"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)

    #relationships
    product = relationship("Product", back_populates="images")

    image_url = Column(String(500), nullable=False)
    alt_text = Column(String(255))
    sort_order = Column(Integer, default=0, nullable=False)
    is_primary = Column(Boolean, default=False, nullable=False)
