from datetime import datetime
from typing import Optional
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, joinedload
from models.products import Product
from models.sales import Sale
from models.product_images import PLACEHOLDER_IMAGE
from schemas.sale_schemas import CreateSaleRequest, UpdateSaleRequest
from services.pricing_service import PricingService, money
from core.exceptions import NotFoundError, ValidationError
from utils.logger import get_logger

logger = get_logger(__name__)

OVERLAP_MESSAGE = "There is already an active sale for this product during the specified period"


class SaleService:

    @staticmethod
    def admit_sale(db: Session, product_id: int, start_date: datetime, end_date: datetime,
                   quantity_available: int, exclude_sale_id: Optional[int] = None) -> Product:
        """
        Admission check for a new or updated sale window.

        Checks, in order:
        1. The product exists (its row stays locked until the caller commits)
        2. quantity_available does not exceed the product's stock
        3. No other active sale of the product overlaps [start_date, end_date],
           bounds inclusive; ``exclude_sale_id`` skips the sale being updated

        Returns the locked product.

        Raises:
            NotFoundError: unknown product
            ValidationError: stock or overlap violation
        """
        product = db.query(Product).filter(Product.id == product_id).with_for_update().one_or_none()
        if not product:
            raise NotFoundError("Product")

        if quantity_available > product.stock:
            logger.warning(
                "Sale rejected - quantity exceeds stock",
                extra={"product_id": product_id, "quantity_available": quantity_available,
                       "stock": product.stock}
            )
            raise ValidationError(
                f"Quantity available ({quantity_available}) cannot exceed product stock ({product.stock})"
            )

        overlapping = db.query(Sale.id).filter(
            Sale.product_id == product_id,
            Sale.status == "active",
            or_(
                and_(Sale.start_date <= start_date, Sale.end_date >= start_date),
                and_(Sale.start_date <= end_date, Sale.end_date >= end_date),
                and_(Sale.start_date >= start_date, Sale.end_date <= end_date)
            )
        )
        if exclude_sale_id is not None:
            overlapping = overlapping.filter(Sale.id != exclude_sale_id)

        conflict = overlapping.with_for_update().first()
        if conflict:
            logger.warning(
                "Sale rejected - overlapping window",
                extra={"product_id": product_id, "conflicting_sale_id": conflict.id}
            )
            raise ValidationError(OVERLAP_MESSAGE)

        return product

    @staticmethod
    def create_sale(db: Session, request: CreateSaleRequest) -> Sale:
        """
        Admits and stores a new active sale.

        Flow:
        1. Sweep expired sales (commits, so it runs before any row is locked)
        2. Run the admission check, which locks the product row
        3. Insert the sale and commit
        """
        PricingService.sweep_expired_sales(db)
        SaleService.admit_sale(db, request.product_id, request.start_date, request.end_date,
                               request.quantity_available)

        sale = Sale(
            product_id=request.product_id,
            original_price=request.original_price,
            sale_price=request.sale_price,
            discount_percentage=request.discount_percentage,
            quantity_available=request.quantity_available,
            quantity_sold=0,
            start_date=request.start_date,
            end_date=request.end_date,
            status="active"
        )
        db.add(sale)
        db.commit()
        db.refresh(sale)

        logger.info(
            "Sale created",
            extra={"sale_id": sale.id, "product_id": sale.product_id}
        )
        return sale

    @staticmethod
    def update_sale(db: Session, sale_id: int, request: UpdateSaleRequest) -> Sale:
        """
        Re-admits the sale with its new window and quantity, ignoring its own
        current row in the overlap check, then overwrites it.

        Raises:
            NotFoundError: unknown sale or product
            ValidationError: stock or overlap violation
        """
        PricingService.sweep_expired_sales(db)
        sale = db.query(Sale).filter(Sale.id == sale_id).with_for_update().one_or_none()
        if not sale:
            raise NotFoundError("Sale")

        SaleService.admit_sale(db, sale.product_id, request.start_date, request.end_date,
                               request.quantity_available, exclude_sale_id=sale.id)

        sale.original_price = request.original_price
        sale.sale_price = request.sale_price
        sale.discount_percentage = request.discount_percentage
        sale.quantity_available = request.quantity_available
        sale.start_date = request.start_date
        sale.end_date = request.end_date
        sale.status = request.status
        db.commit()
        db.refresh(sale)

        logger.info("Sale updated", extra={"sale_id": sale.id, "sale_status": sale.status})
        return sale

    @staticmethod
    def delete_sale(db: Session, sale_id: int):
        sale = db.query(Sale).filter(Sale.id == sale_id).one_or_none()
        if not sale:
            raise NotFoundError("Sale")

        db.delete(sale)
        db.commit()
        logger.info("Sale deleted", extra={"sale_id": sale_id})

    @staticmethod
    def list_sales(db: Session) -> list[Sale]:
        """Every sale, newest first, after the expiry sweep."""
        PricingService.sweep_expired_sales(db)
        return db.query(Sale).options(
            joinedload(Sale.product).joinedload(Product.category),
            joinedload(Sale.product).selectinload(Product.images)
        ).order_by(Sale.created_at.desc(), Sale.id.desc()).all()

    @staticmethod
    def get_sale(db: Session, sale_id: int) -> Sale:
        PricingService.sweep_expired_sales(db)
        sale = db.query(Sale).filter(Sale.id == sale_id).one_or_none()
        if not sale:
            raise NotFoundError("Sale")
        return sale

    @staticmethod
    def to_dict(sale: Sale) -> dict:
        product = sale.product
        return {
            "id": sale.id,
            "productId": sale.product_id,
            "productName": product.name,
            "productStock": product.stock,
            "categoryName": product.category.name if product.category else None,
            "productImage": product.primary_image or PLACEHOLDER_IMAGE,
            "originalPrice": money(sale.original_price),
            "salePrice": money(sale.sale_price),
            "discountPercentage": money(sale.discount_percentage),
            "quantityAvailable": sale.quantity_available,
            "quantitySold": sale.quantity_sold,
            "startDate": sale.start_date,
            "endDate": sale.end_date,
            "status": sale.status,
            "createdAt": sale.created_at,
            "updatedAt": sale.updated_at
        }

