from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, selectinload
from models.orders import Order
from models.order_items import OrderItem
from models.order_ratings import OrderRating, OrderRatingImage, MAX_RATING_IMAGES
from schemas.rating_schemas import CreateRatingRequest
from core.exceptions import ConflictError, NotFoundError, ValidationError
from utils.logger import get_logger

logger = get_logger(__name__)

ALREADY_RATED_MESSAGE = "You have already rated this order. Each order can only be rated once."


class RatingService:

    @staticmethod
    def to_dict(rating: OrderRating) -> dict:
        return {
            "id": rating.id,
            "rating": rating.rating,
            "reviewText": rating.review_text,
            "createdAt": rating.created_at,
            "updatedAt": rating.updated_at,
            "userName": rating.user.name,
            "userEmail": rating.user.email,
            "orderNumber": rating.order.order_number,
            "orderStatus": rating.order.status,
            "images": [
                {
                    "id": image.id,
                    "imageUrl": image.image_url,
                    "imageName": image.image_name,
                    "imageSize": image.image_size,
                    "createdAt": image.created_at
                }
                for image in rating.images
            ]
        }

    @staticmethod
    def get_order_ratings(db: Session, order_id: int, user_id: Optional[int] = None) -> dict:
        """All ratings on the order, plus the caller's own as ``userRating``."""
        ratings = db.query(OrderRating).options(
            joinedload(OrderRating.user),
            joinedload(OrderRating.order),
            selectinload(OrderRating.images)
        ).filter(
            OrderRating.order_id == order_id
        ).order_by(OrderRating.created_at.desc(), OrderRating.id.desc()).all()

        own = next((r for r in ratings if user_id is not None and r.user_id == user_id), None)

        return {
            "ratings": [RatingService.to_dict(r) for r in ratings],
            "userRating": {
                "rating": own.rating,
                "reviewText": own.review_text,
                "createdAt": own.created_at,
                "updatedAt": own.updated_at
            } if own else None
        }

    @staticmethod
    def create_rating(db: Session, user_id: int, request: CreateRatingRequest) -> OrderRating:
        """
        Rates one of the caller's delivered orders. Each order can be rated
        once per user; only the first three images are kept.
        """
        order = db.query(Order).filter(
            Order.id == request.order_id,
            Order.user_id == user_id
        ).one_or_none()
        if not order:
            raise NotFoundError(detail="Order not found or not authorized")

        if order.status != "delivered":
            raise ValidationError("Can only rate delivered orders")

        existing = db.query(OrderRating.id).filter(
            OrderRating.user_id == user_id,
            OrderRating.order_id == order.id
        ).first()
        if existing:
            raise ConflictError(ALREADY_RATED_MESSAGE)

        rating = OrderRating(
            user_id=user_id,
            order_id=order.id,
            rating=request.rating,
            review_text=request.review_text or None
        )
        for image in request.images[:MAX_RATING_IMAGES]:
            rating.images.append(OrderRatingImage(
                image_url=image.image_url,
                image_name=image.image_name,
                image_size=image.image_size
            ))

        db.add(rating)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError(ALREADY_RATED_MESSAGE)

        db.refresh(rating)
        logger.info(
            "Order rated",
            extra={"order_id": order.id, "user_id": user_id, "rating": request.rating,
                   "images": len(rating.images)}
        )
        return rating

    @staticmethod
    def delete_rating(db: Session, user_id: int, order_id: int):
        """
        Raises:
            NotFoundError: the user has not rated this order
        """
        rating = db.query(OrderRating).filter(
            OrderRating.user_id == user_id,
            OrderRating.order_id == order_id
        ).one_or_none()
        if not rating:
            raise NotFoundError("Rating")

        db.delete(rating)
        db.commit()
        logger.info("Rating deleted", extra={"order_id": order_id, "user_id": user_id})

    @staticmethod
    def product_ratings(db: Session, product_id: int) -> dict:
        """
        Ratings left on delivered orders that contain the product, with the
        average (one decimal, as a string), count and star distribution.
        """
        rows = db.query(OrderRating, OrderItem.product_name).join(
            Order, Order.id == OrderRating.order_id
        ).join(
            OrderItem, OrderItem.order_id == Order.id
        ).options(
            joinedload(OrderRating.user),
            joinedload(OrderRating.order),
            selectinload(OrderRating.images)
        ).filter(
            OrderItem.product_id == product_id,
            Order.status == "delivered"
        ).order_by(OrderRating.created_at.desc(), OrderRating.id.desc()).all()

        scores = [rating.rating for rating, _ in rows]
        total = len(scores)
        average = f"{sum(scores) / total:.1f}" if total else "0.0"

        return {
            "ratings": [
                {**RatingService.to_dict(rating), "productName": product_name}
                for rating, product_name in rows
            ],
            "stats": {
                "averageRating": average,
                "totalRatings": total,
                "ratingDistribution": {
                    f"{star}Star": scores.count(star) for star in range(5, 0, -1)
                }
            }
        }
