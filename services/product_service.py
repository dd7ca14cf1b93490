from datetime import datetime
from typing import Iterable, Optional
from sqlalchemy import func, distinct
from sqlalchemy.orm import Session, joinedload, selectinload
from models.categories import Category
from models.products import Product
from models.product_images import ProductImage
from models.sales import Sale
from models.orders import Order
from models.order_items import OrderItem
from models.order_ratings import OrderRating
from schemas.product_schemas import CreateProductRequest, UpdateProductRequest
from services.pricing_service import PricingService, money
from core.exceptions import NotFoundError, ValidationError
from utils.dates import utc_now
from utils.logger import get_logger

logger = get_logger(__name__)


class ProductService:

    @staticmethod
    def rating_stats(db: Session, product_ids: Iterable[int]) -> dict[int, tuple[float, int]]:
        """
        product id -> (average rating, number of ratings), over ratings left
        on delivered orders that contain the product.
        """
        product_ids = list(product_ids)
        if not product_ids:
            return {}

        rows = db.query(
            OrderItem.product_id,
            func.avg(OrderRating.rating),
            func.count(distinct(OrderRating.id))
        ).join(
            Order, Order.id == OrderItem.order_id
        ).join(
            OrderRating, OrderRating.order_id == Order.id
        ).filter(
            Order.status == "delivered",
            OrderItem.product_id.in_(product_ids)
        ).group_by(OrderItem.product_id).all()

        return {product_id: (float(avg or 0), count) for product_id, avg, count in rows}

    @staticmethod
    def to_dict(product: Product, sale: Optional[Sale], now: datetime,
                rating: tuple[float, int] = (0.0, 0), with_images: bool = False) -> dict:
        on_sale = PricingService.is_on_sale(sale, now)
        pricing = PricingService.effective_price(product, sale, now)

        data = {
            "id": product.id,
            "name": product.name,
            "category": product.category.name if product.category else None,
            "price": pricing["price"],
            "originalPrice": pricing.get("originalPrice"),
            "listPrice": money(product.price),
            "stock": product.stock,
            "status": product.status,
            "description": product.description,
            "image": product.primary_image,
            "isOnSale": on_sale,
            "saleInfo": PricingService.sale_info(sale, now),
            "averageRating": round(rating[0], 2),
            "totalRatings": rating[1]
        }

        if with_images:
            data["images"] = [
                {"url": image.image_url, "alt": image.alt_text, "isPrimary": bool(image.is_primary)}
                for image in product.images
            ]
            if data["image"] is None and product.images:
                data["image"] = product.images[0].image_url

        return data

    @staticmethod
    def list_products(db: Session) -> list[dict]:
        """
        The whole catalog, newest first, with effective prices, sale info and
        rating aggregates.
        """
        now = utc_now()
        PricingService.sweep_expired_sales(db, now)

        products = db.query(Product).options(
            joinedload(Product.category),
            selectinload(Product.images)
        ).order_by(Product.id.desc()).all()

        ids = [p.id for p in products]
        sales = PricingService.find_active_sales(db, ids, now)
        ratings = ProductService.rating_stats(db, ids)

        return [
            ProductService.to_dict(p, sales.get(p.id), now, ratings.get(p.id, (0.0, 0)))
            for p in products
        ]

    @staticmethod
    def get_product(db: Session, product_id: int) -> dict:
        """One product in the catalog shape plus its ordered ``images``."""
        now = utc_now()
        PricingService.sweep_expired_sales(db, now)

        product = db.query(Product).options(
            joinedload(Product.category),
            selectinload(Product.images)
        ).filter(Product.id == product_id).one_or_none()

        if not product:
            raise NotFoundError("Product")

        sale = PricingService.get_active_sale(db, product.id, now)
        rating = ProductService.rating_stats(db, [product.id]).get(product.id, (0.0, 0))

        return ProductService.to_dict(product, sale, now, rating, with_images=True)

    @staticmethod
    def _category_id(db: Session, name: str) -> int:
        category_id = db.query(Category.id).filter(Category.name == name).scalar()
        if category_id is None:
            raise ValidationError("Category not found")
        return category_id

    @staticmethod
    def _replace_images(product: Product, urls: list[str]):
        product.images.clear()
        for idx, url in enumerate(urls):
            product.images.append(ProductImage(
                image_url=url,
                alt_text=product.name,
                sort_order=idx,
                is_primary=idx == 0
            ))

    @staticmethod
    def create_product(db: Session, request: CreateProductRequest) -> Product:
        """
        Creates a product in the named category.

        Status is derived from stock and the first image becomes primary.

        Raises:
            ValidationError: unknown category name
        """
        product = Product(
            name=request.name,
            category_id=ProductService._category_id(db, request.category),
            price=request.price,
            stock=request.stock,
            status=Product.status_for_stock(request.stock),
            description=request.description or None
        )
        ProductService._replace_images(product, request.images)

        db.add(product)
        db.commit()
        db.refresh(product)

        logger.info(
            "Product created",
            extra={"product_id": product.id, "stock": product.stock, "images": len(request.images)}
        )
        return product

    @staticmethod
    def update_product(db: Session, product_id: int, request: UpdateProductRequest) -> Product:
        """
        Overwrites the product and re-derives its status from stock. A given
        ``images`` list replaces the stored images; None keeps them.
        """
        product = db.query(Product).filter(Product.id == product_id).with_for_update().one_or_none()
        if not product:
            raise NotFoundError("Product")

        product.name = request.name
        product.category_id = ProductService._category_id(db, request.category)
        product.price = request.price
        product.stock = request.stock
        product.status = Product.status_for_stock(request.stock)
        product.description = request.description or None

        if request.images is not None:
            ProductService._replace_images(product, request.images)

        db.commit()
        db.refresh(product)

        logger.info("Product updated", extra={"product_id": product.id, "stock": product.stock})
        return product

    @staticmethod
    def delete_product(db: Session, product_id: int):
        product = db.query(Product).filter(Product.id == product_id).one_or_none()
        if not product:
            raise NotFoundError("Product")

        db.delete(product)
        db.commit()
        logger.info("Product deleted", extra={"product_id": product_id})

    @staticmethod
    def list_categories(db: Session) -> list[Category]:
        return db.query(Category).order_by(Category.name).all()
