from typing import Optional
from sqlalchemy.orm import Session, joinedload
from models.notifications import Notification, NOTIFICATION_TYPES
from models.products import Product
from models.product_images import PLACEHOLDER_IMAGE
from models.sales import Sale
from schemas.notification_schemas import CreateNotificationRequest
from services.pricing_service import PricingService, money
from core.exceptions import NotFoundError, ValidationError
from utils.dates import utc_now
from utils.logger import get_logger

logger = get_logger(__name__)

NOTIFICATION_PAGE_SIZE = 50
SALE_FEED_SIZE = 10


class NotificationService:

    @staticmethod
    def list_for_user(db: Session, user_id: int) -> list[Notification]:
        """The user's most recent notifications, newest first."""
        return db.query(Notification).filter(
            Notification.user_id == user_id
        ).order_by(
            Notification.created_at.desc(), Notification.id.desc()
        ).limit(NOTIFICATION_PAGE_SIZE).all()

    @staticmethod
    def add(db: Session, user_id: int, notification_type: str, title: str, message: str,
            product_id: Optional[int] = None, product_name: Optional[str] = None,
            order_id: Optional[int] = None) -> Notification:
        """
        Stages a notification on the session without committing, so it
        lands in the same transaction as the change it reports.
        """
        if notification_type not in NOTIFICATION_TYPES:
            raise ValidationError("Invalid notification type")

        notification = Notification(
            user_id=user_id,
            type=notification_type,
            title=title,
            message=message,
            product_id=product_id,
            product_name=product_name,
            order_id=order_id,
            is_read=False
        )
        db.add(notification)
        return notification

    @staticmethod
    def create(db: Session, user_id: int, request: CreateNotificationRequest) -> Notification:
        notification = NotificationService.add(
            db, user_id,
            notification_type=request.type,
            title=request.title,
            message=request.message,
            product_id=request.product_id,
            product_name=request.product_name,
            order_id=request.order_id
        )
        db.commit()
        db.refresh(notification)
        return notification

    @staticmethod
    def set_read(db: Session, user_id: int, notification_id: int, is_read: bool):
        """Raises NotFoundError when no notification of this user matched."""
        updated = db.query(Notification).filter(
            Notification.id == notification_id,
            Notification.user_id == user_id
        ).update({"is_read": is_read, "updated_at": utc_now()}, synchronize_session=False)
        db.commit()

        if updated == 0:
            raise NotFoundError(detail="Notification not found or unauthorized")

    @staticmethod
    def delete(db: Session, user_id: int, notification_id: int):
        deleted = db.query(Notification).filter(
            Notification.id == notification_id,
            Notification.user_id == user_id
        ).delete(synchronize_session=False)
        db.commit()

        if deleted == 0:
            raise NotFoundError(detail="Notification not found or unauthorized")

    @staticmethod
    def mark_all_read(db: Session, user_id: int) -> int:
        """Returns how many unread notifications were flipped."""
        updated = db.query(Notification).filter(
            Notification.user_id == user_id,
            Notification.is_read == False
        ).update({"is_read": True, "updated_at": utc_now()}, synchronize_session=False)
        db.commit()
        return updated

    @staticmethod
    def to_dict(notification: Notification) -> dict:
        return {
            "id": notification.id,
            "type": notification.type,
            "title": notification.title,
            "message": notification.message,
            "isRead": bool(notification.is_read),
            "createdAt": notification.created_at,
            "productId": notification.product_id,
            "productName": notification.product_name,
            "orderId": notification.order_id
        }

    @staticmethod
    def sale_feed(db: Session, limit: int = SALE_FEED_SIZE) -> list[dict]:
        """
        Sale notifications are computed from live sale rows on every call
        and never stored: running sales that are not sold out, biggest
        discount first, then newest.
        """
        now = utc_now()
        PricingService.sweep_expired_sales(db, now)

        sales = db.query(Sale).options(
            joinedload(Sale.product).joinedload(Product.category)
        ).filter(
            Sale.status == "active",
            Sale.start_date <= now,
            Sale.end_date >= now,
            Sale.quantity_available > Sale.quantity_sold
        ).order_by(
            Sale.discount_percentage.desc(),
            Sale.created_at.desc(),
            Sale.id.desc()
        ).limit(limit).all()

        feed = []
        for sale in sales:
            product = sale.product
            original = money(sale.original_price)
            price = money(sale.sale_price)
            discount = money(sale.discount_percentage)
            savings = round(original - price, 2)

            feed.append({
                "id": f"sale-{sale.id}",
                "type": "sale",
                "title": "🔥 Special Sale!",
                "message": f"{product.name} is on sale! {discount:g}% off - Save ₱{savings:.2f}",
                "productId": sale.product_id,
                "productName": product.name,
                "productImage": product.primary_image or PLACEHOLDER_IMAGE,
                "categoryName": product.category.name if product.category else None,
                "originalPrice": original,
                "salePrice": price,
                "discountPercentage": discount,
                "quantityAvailable": PricingService.remaining_sale_quantity(sale),
                "startDate": sale.start_date,
                "endDate": sale.end_date,
                "savings": savings,
                "isRead": False,
                "createdAt": sale.start_date
            })
        return feed
