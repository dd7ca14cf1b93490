from core.database import Base
from sqlalchemy import (Column, Integer, ForeignKey, UniqueConstraint)
from sqlalchemy.orm import relationship
from .mixins import CreatedAtMixin

class Favorite(Base, CreatedAtMixin):
    __tablename__ = "favorites"
    __table_args__ = (UniqueConstraint("user_id", "product_id", name="uq_favorite_user_product"),)

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)

    #relationships
    user = relationship("User", back_populates="favorites")
    product = relationship("Product", back_populates="favorites")
