from sqlalchemy.orm import Session, joinedload, selectinload
from models.cart_items import CartItem
from models.products import Product
from models.product_images import PLACEHOLDER_IMAGE
from schemas.cart_schemas import AddToCartRequest, UpdateCartRequest
from services.pricing_service import PricingService
from core.exceptions import NotFoundError, ValidationError
from utils.dates import utc_now
from utils.logger import get_logger

logger = get_logger(__name__)


def insufficient_stock(stock: int) -> ValidationError:
    return ValidationError(f"Insufficient stock. Only {stock} items available.")


class CartService:
    """
    Cart reads and the stock guard on cart writes.

    Quantities are checked against the product's stock as the cart's new
    total for that product, never just the amount being added, and the
    product row is locked while the check and the write happen.
    """

    @staticmethod
    def get_items(db: Session, user_id: int) -> list[dict]:
        """
        The user's cart lines, newest first, priced through the sale resolver.

        Expired sales are swept first, so ``price`` is the sale price only for
        a sale that is running right now; ``originalPrice`` is set only then.
        """
        now = utc_now()
        PricingService.sweep_expired_sales(db, now)

        items = db.query(CartItem).options(
            joinedload(CartItem.product).joinedload(Product.category),
            joinedload(CartItem.product).selectinload(Product.images)
        ).filter(
            CartItem.user_id == user_id
        ).order_by(CartItem.created_at.desc(), CartItem.id.desc()).all()

        sales = PricingService.find_active_sales(db, [i.product_id for i in items], now)

        result = []
        for item in items:
            product = item.product
            sale = sales.get(product.id)
            pricing = PricingService.effective_price(product, sale, now)
            result.append({
                "id": item.id,
                "productId": product.id,
                "name": product.name,
                "price": pricing["price"],
                "originalPrice": pricing.get("originalPrice"),
                "quantity": item.quantity,
                "stock": product.stock,
                "image": product.primary_image or PLACEHOLDER_IMAGE,
                "category": product.category.name if product.category else None,
                "status": product.status,
                "isOnSale": PricingService.is_on_sale(sale, now)
            })
        return result

    @staticmethod
    def _lock_product(db: Session, product_id: int) -> Product:
        product = db.query(Product).filter(Product.id == product_id).with_for_update().one_or_none()
        if not product:
            raise NotFoundError("Product")
        return product

    @staticmethod
    def _find_item(db: Session, user_id: int, product_id: int) -> CartItem | None:
        return db.query(CartItem).filter(
            CartItem.user_id == user_id,
            CartItem.product_id == product_id
        ).one_or_none()

    @staticmethod
    def add_item(db: Session, user_id: int, request: AddToCartRequest) -> CartItem:
        """
        Adds ``request.quantity`` to the user's cart line for the product,
        creating the line if needed.

        Raises:
            NotFoundError: unknown product
            ValidationError: the resulting total exceeds stock, or the
                product is not active
        """
        product = CartService._lock_product(db, request.product_id)
        item = CartService._find_item(db, user_id, product.id)

        desired = (item.quantity if item else 0) + request.quantity
        if product.stock < desired:
            logger.warning(
                "Cart stock check failed",
                extra={"user_id": user_id, "product_id": product.id,
                       "requested": desired, "stock": product.stock}
            )
            raise insufficient_stock(product.stock)

        if product.status != "active":
            raise ValidationError("Product is not available")

        if item:
            item.quantity = desired
        else:
            item = CartItem(user_id=user_id, product_id=product.id, quantity=desired)
            db.add(item)

        db.commit()
        db.refresh(item)

        logger.info(
            "Cart item added",
            extra={"user_id": user_id, "product_id": product.id, "quantity": item.quantity}
        )
        return item

    @staticmethod
    def set_quantity(db: Session, user_id: int, request: UpdateCartRequest) -> CartItem | None:
        """
        Sets the cart line to an absolute quantity. Zero or less removes the
        line and returns None.
        """
        if request.quantity <= 0:
            CartService.remove_item(db, user_id, request.product_id)
            return None

        product = CartService._lock_product(db, request.product_id)
        item = CartService._find_item(db, user_id, product.id)
        if not item:
            raise NotFoundError("Cart item")

        if product.stock < request.quantity:
            logger.warning(
                "Cart stock check failed",
                extra={"user_id": user_id, "product_id": product.id,
                       "requested": request.quantity, "stock": product.stock}
            )
            raise insufficient_stock(product.stock)

        item.quantity = request.quantity
        db.commit()
        db.refresh(item)
        return item

    @staticmethod
    def remove_item(db: Session, user_id: int, product_id: int) -> bool:
        """Deletes the cart line. Returns False when there was nothing to delete."""
        deleted = db.query(CartItem).filter(
            CartItem.user_id == user_id,
            CartItem.product_id == product_id
        ).delete(synchronize_session=False)
        db.commit()
        return deleted > 0
