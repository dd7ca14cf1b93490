"""
Sale-aware pricing.

A product's effective price at time T is the sale price of its active sale
whose window contains T, else its list price. Sales past their end date are
flipped to ``expired`` lazily by ``sweep_expired_sales``, which every
sale-aware read runs first.
"""

from datetime import datetime
from typing import Iterable, Optional
from sqlalchemy.orm import Session
from models.products import Product
from models.sales import Sale
from utils.dates import utc_now
from utils.logger import get_logger

logger = get_logger(__name__)


def money(value) -> float:
    """Numeric column value -> float for API responses."""
    return float(value) if value is not None else 0.0


class PricingService:

    @staticmethod
    def is_on_sale(sale: Optional[Sale], now: datetime) -> bool:
        return (
            sale is not None
            and sale.status == "active"
            and sale.start_date <= now <= sale.end_date
        )

    @staticmethod
    def effective_price(product: Product, sale: Optional[Sale], now: datetime) -> dict:
        """
        ``{"price": ...}`` at list price, or
        ``{"price": sale price, "originalPrice": ...}`` while the sale runs.
        """
        if PricingService.is_on_sale(sale, now):
            return {
                "price": money(sale.sale_price),
                "originalPrice": money(sale.original_price)
            }
        return {"price": money(product.price)}

    @staticmethod
    def remaining_sale_quantity(sale: Sale) -> int:
        return max(sale.quantity_available - (sale.quantity_sold or 0), 0)

    @staticmethod
    def sweep_expired_sales(db: Session, now: datetime | None = None) -> int:
        """
        Marks every active sale whose end_date has passed as expired and
        commits. Returns the number of sales swept.
        """
        now = now or utc_now()

        swept = db.query(Sale).filter(
            Sale.status == "active",
            Sale.end_date < now
        ).update({"status": "expired", "updated_at": now}, synchronize_session=False)
        db.commit()

        if swept:
            logger.info("Expired sales swept", extra={"swept": swept})

        return swept

    @staticmethod
    def find_active_sales(db: Session, product_ids: Iterable[int], now: datetime) -> dict[int, Sale]:
        """
        Maps product id -> the sale running at ``now``.

        Admission keeps windows from overlapping; should two active rows
        still cover ``now``, the most recently created one wins.
        """
        product_ids = list(product_ids)
        if not product_ids:
            return {}

        rows = db.query(Sale).filter(
            Sale.product_id.in_(product_ids),
            Sale.status == "active",
            Sale.start_date <= now,
            Sale.end_date >= now
        ).order_by(Sale.created_at.desc(), Sale.id.desc()).all()

        active = {}
        for sale in rows:
            active.setdefault(sale.product_id, sale)
        return active

    @staticmethod
    def get_active_sale(db: Session, product_id: int, now: datetime) -> Optional[Sale]:
        return PricingService.find_active_sales(db, [product_id], now).get(product_id)

    @staticmethod
    def sale_info(sale: Optional[Sale], now: datetime) -> Optional[dict]:
        if not PricingService.is_on_sale(sale, now):
            return None
        return {
            "saleId": sale.id,
            "discountPercentage": money(sale.discount_percentage),
            "saleQuantity": sale.quantity_available,
            "remainingQuantity": PricingService.remaining_sale_quantity(sale),
            "startDate": sale.start_date,
            "endDate": sale.end_date
        }
