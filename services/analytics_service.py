from collections import OrderedDict
from datetime import timedelta
from sqlalchemy import func, distinct, case
from sqlalchemy.orm import Session, joinedload
from models.categories import Category
from models.products import Product
from models.orders import Order
from models.order_items import OrderItem
from models.order_ratings import OrderRating
from services.pricing_service import money
from utils.dates import utc_now

LOW_STOCK_OVERVIEW = 10
LOW_STOCK_ALERT = 20
REMINDER_MESSAGES = {
    "confirmed": "Order confirmed - ready for processing",
    "processing": "Order processing - check progress"
}


class AnalyticsService:
    """Read-only aggregates for the admin dashboard."""

    @staticmethod
    def overview(db: Session) -> dict:
        """Headline counts. Revenue leaves out cancelled orders."""
        revenue = db.query(func.coalesce(func.sum(Order.total_amount), 0)).filter(
            Order.status != "cancelled"
        ).scalar()

        return {
            "totalProducts": db.query(func.count(Product.id)).filter(Product.status == "active").scalar(),
            "totalOrders": db.query(func.count(Order.id)).scalar(),
            "totalCustomers": db.query(func.count(distinct(Order.user_id))).scalar(),
            "totalRevenue": money(revenue)
        }

    @staticmethod
    def _low_stock(db: Session, threshold: int, limit: int) -> list[Product]:
        return db.query(Product).options(joinedload(Product.category)).filter(
            Product.stock <= threshold,
            Product.status == "active"
        ).order_by(Product.stock.asc(), Product.id.asc()).limit(limit).all()

    @staticmethod
    def _recent_reviews(db: Session, limit: int = 5) -> list:
        return db.query(OrderRating, OrderItem.product_id, OrderItem.product_name).join(
            Order, Order.id == OrderRating.order_id
        ).join(
            OrderItem, OrderItem.order_id == Order.id
        ).options(
            joinedload(OrderRating.user),
            joinedload(OrderRating.order)
        ).order_by(
            OrderRating.created_at.desc(), OrderRating.id.desc()
        ).limit(limit).all()

    @staticmethod
    def monthly_revenue(db: Session, months: int = 12) -> list[dict]:
        """Non-cancelled revenue per calendar month, oldest first."""
        since = utc_now() - timedelta(days=months * 31)
        orders = db.query(Order.created_at, Order.total_amount).filter(
            Order.status != "cancelled",
            Order.created_at >= since
        ).order_by(Order.created_at.asc()).all()

        buckets = OrderedDict()
        for created_at, total in orders:
            key = created_at.strftime("%Y-%m")
            bucket = buckets.setdefault(key, {"month": created_at.strftime("%b"), "revenue": 0.0, "orders": 0})
            bucket["revenue"] += money(total)
            bucket["orders"] += 1

        result = []
        for bucket in list(buckets.values())[-months:]:
            result.append({
                "month": bucket["month"],
                "revenue": round(bucket["revenue"], 2),
                "orders": bucket["orders"],
                "avgOrder": round(bucket["revenue"] / bucket["orders"])
            })
        return result

    @staticmethod
    def revenue_by_category(db: Session) -> list[dict]:
        rows = db.query(
            Category.name,
            func.sum(OrderItem.total_price)
        ).join(
            Product, Product.category_id == Category.id
        ).join(
            OrderItem, OrderItem.product_id == Product.id
        ).join(
            Order, Order.id == OrderItem.order_id
        ).filter(
            Order.status != "cancelled"
        ).group_by(Category.id, Category.name).all()

        rows = sorted(((name, money(revenue)) for name, revenue in rows if revenue), key=lambda r: -r[1])
        total = sum(revenue for _, revenue in rows)

        return [
            {
                "category": name,
                "revenue": revenue,
                "percentage": round(revenue / total * 100) if total > 0 else 0
            }
            for name, revenue in rows
        ]

    @staticmethod
    def _order_feed(db: Session, statuses_filter, since, order_by, limit: int) -> list:
        return db.query(Order, func.count(OrderItem.id)).outerjoin(
            OrderItem, OrderItem.order_id == Order.id
        ).filter(
            statuses_filter,
            Order.created_at >= since
        ).group_by(Order.id).order_by(*order_by).limit(limit).all()

    @staticmethod
    def dashboard(db: Session) -> dict:
        """Everything the admin dashboard renders in one payload."""
        now = utc_now()

        recent_orders = db.query(Order).order_by(Order.created_at.desc(), Order.id.desc()).limit(4).all()
        reviews = AnalyticsService._recent_reviews(db)

        new_orders = AnalyticsService._order_feed(
            db, Order.status != "cancelled", now - timedelta(hours=24),
            (Order.created_at.desc(),), 10
        )
        reminders = AnalyticsService._order_feed(
            db, Order.status.in_(tuple(REMINDER_MESSAGES)), now - timedelta(days=7),
            (case((Order.status == "processing", 1), else_=2), Order.created_at.asc()), 15
        )

        return {
            "overview": AnalyticsService.overview(db),
            "recentOrders": [
                {
                    "id": order.order_number,
                    "customer": order.customer_name,
                    "amount": f"₱{money(order.total_amount):.2f}",
                    "status": order.status,
                    "date": order.created_at
                }
                for order in recent_orders
            ],
            "lowStockProducts": [
                {"name": p.name, "stock": p.stock, "category": p.category.name if p.category else None}
                for p in AnalyticsService._low_stock(db, LOW_STOCK_OVERVIEW, 4)
            ],
            "notifications": {
                "lowStock": [
                    {
                        "id": p.id,
                        "name": p.name,
                        "stock": p.stock,
                        "category": p.category.name if p.category else None,
                        "updatedAt": p.updated_at,
                        "type": "low_stock",
                        "message": f"{p.name} is running low ({p.stock} items left)"
                    }
                    for p in AnalyticsService._low_stock(db, LOW_STOCK_ALERT, 10)
                ],
                "newReviews": [
                    {
                        "id": review.id,
                        "customerName": review.user.name,
                        "productName": product_name,
                        "rating": review.rating,
                        "reviewText": review.review_text,
                        "createdAt": review.created_at,
                        "orderNumber": review.order.order_number,
                        "type": "new_review",
                        "message": f"New {review.rating}-star review from {review.user.name} for {product_name}"
                    }
                    for review, _, product_name in reviews
                ],
                "newOrders": [
                    {
                        "id": order.id,
                        "orderNumber": order.order_number,
                        "customerName": order.customer_name,
                        "totalAmount": money(order.total_amount),
                        "status": order.status,
                        "itemCount": item_count,
                        "createdAt": order.created_at,
                        "type": "new_order",
                        "message": f"New order #{order.order_number} from {order.customer_name}"
                                   f" - ₱{money(order.total_amount):.2f}"
                    }
                    for order, item_count in new_orders
                ],
                "orderReminders": [
                    {
                        "id": order.id,
                        "orderNumber": order.order_number,
                        "customerName": order.customer_name,
                        "totalAmount": money(order.total_amount),
                        "status": order.status,
                        "itemCount": item_count,
                        "createdAt": order.created_at,
                        "updatedAt": order.updated_at,
                        "type": "order_reminder",
                        "message": REMINDER_MESSAGES[order.status]
                    }
                    for order, item_count in reminders
                ]
            },
            "monthlyRevenue": AnalyticsService.monthly_revenue(db),
            "revenueByCategory": AnalyticsService.revenue_by_category(db),
            "recentReviews": [
                {
                    "id": review.id,
                    "rating": review.rating,
                    "reviewText": review.review_text,
                    "createdAt": review.created_at,
                    "customerName": review.user.name,
                    "orderNumber": review.order.order_number,
                    "productName": product_name,
                    "productId": product_id
                }
                for review, product_id, product_name in reviews
            ]
        }
