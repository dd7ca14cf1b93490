from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, selectinload
from models.favorites import Favorite
from models.products import Product
from models.product_images import PLACEHOLDER_IMAGE
from services.pricing_service import money
from core.exceptions import ConflictError, NotFoundError
from utils.logger import get_logger

logger = get_logger(__name__)


class FavoriteService:

    @staticmethod
    def list_items(db: Session, user_id: int) -> list[dict]:
        """The user's favorites, newest first, at list price."""
        favorites = db.query(Favorite).options(
            joinedload(Favorite.product).joinedload(Product.category),
            joinedload(Favorite.product).selectinload(Product.images)
        ).filter(
            Favorite.user_id == user_id
        ).order_by(Favorite.created_at.desc(), Favorite.id.desc()).all()

        return [
            {
                "id": favorite.id,
                "productId": favorite.product_id,
                "name": favorite.product.name,
                "price": money(favorite.product.price),
                "image": favorite.product.primary_image or PLACEHOLDER_IMAGE,
                "category": favorite.product.category.name if favorite.product.category else None,
                "status": favorite.product.status
            }
            for favorite in favorites
        ]

    @staticmethod
    def add(db: Session, user_id: int, product_id: int) -> Favorite:
        """
        Adds the product to the user's favorites.

        Raises:
            NotFoundError: unknown product
            ConflictError: the pair is already a favorite
        """
        if not db.query(Product.id).filter(Product.id == product_id).first():
            raise NotFoundError("Product")

        existing = db.query(Favorite.id).filter(
            Favorite.user_id == user_id,
            Favorite.product_id == product_id
        ).first()
        if existing:
            raise ConflictError("Product already in favorites")

        favorite = Favorite(user_id=user_id, product_id=product_id)
        db.add(favorite)
        try:
            db.commit()
        except IntegrityError:
            # A concurrent request inserted the same pair first
            db.rollback()
            raise ConflictError("Product already in favorites")

        db.refresh(favorite)
        logger.info("Favorite added", extra={"user_id": user_id, "product_id": product_id})
        return favorite

    @staticmethod
    def remove(db: Session, user_id: int, product_id: int):
        """Removing a pair that is not there is not an error."""
        db.query(Favorite).filter(
            Favorite.user_id == user_id,
            Favorite.product_id == product_id
        ).delete(synchronize_session=False)
        db.commit()
