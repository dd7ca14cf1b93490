from decimal import Decimal
from typing import Optional
from sqlalchemy.orm import Session, selectinload
from models.orders import Order
from models.order_items import OrderItem
from models.order_ratings import OrderRating
from models.products import Product
from models.product_images import ProductImage, PLACEHOLDER_IMAGE
from models.sales import Sale
from schemas.order_schemas import CreateOrderRequest
from services.pricing_service import PricingService, money
from services.cart_service import insufficient_stock
from services.notification_service import NotificationService
from core.config import settings
from core.exceptions import NotFoundError, ValidationError
from utils.dates import utc_now
from utils.identifiers import generate_order_number
from utils.logger import get_logger

logger = get_logger(__name__)

STATUS_TITLES = {
    "confirmed": "Order Confirmed",
    "processing": "Order Processing",
    "shipped": "Order Shipped",
    "delivered": "Order Delivered",
    "cancelled": "Order Cancelled"
}

STATUS_MESSAGES = {
    "confirmed": "Your order has been confirmed and is being prepared",
    "processing": "Your order is now being processed",
    "shipped": "Your order has been shipped and is on its way",
    "delivered": "Your order has been delivered successfully",
    "cancelled": "Your order has been cancelled"
}


def delivery_fee_for(delivery_method: str, subtotal: Decimal) -> Decimal:
    if delivery_method != "delivery":
        return Decimal("0")
    if subtotal >= Decimal(str(settings.FREE_DELIVERY_THRESHOLD)):
        return Decimal("0")
    return Decimal(str(settings.DELIVERY_FEE))


class OrderService:

    @staticmethod
    def _new_order_number(db: Session) -> str:
        for _ in range(5):
            number = generate_order_number()
            if not db.query(Order.id).filter(Order.order_number == number).first():
                return number
        raise RuntimeError("Could not allocate a unique order number")

    @staticmethod
    def _take_stock(db: Session, product_id: int, quantity: int) -> bool:
        """Atomically removes ``quantity`` from stock if at least that much is left."""
        updated = db.query(Product).filter(
            Product.id == product_id,
            Product.stock >= quantity
        ).update({
            Product.stock: Product.stock - quantity,
            Product.updated_at: utc_now()
        }, synchronize_session=False)
        return updated == 1

    @staticmethod
    def place_order(db: Session, user_id: int, request: CreateOrderRequest) -> Order:
        """
        Buys ``request.quantity`` of one product at its effective price.

        Within one transaction: lock the product, price it through the sale
        resolver, check stock (and remaining sale quantity when on sale),
        write the order with a snapshot item, decrement stock and the sale
        counter with conditional updates, and notify the buyer.
        """
        now = utc_now()
        PricingService.sweep_expired_sales(db, now)

        product = db.query(Product).filter(
            Product.id == request.product_id
        ).with_for_update().one_or_none()
        if not product:
            raise NotFoundError("Product")

        if product.status != "active":
            raise ValidationError("Product is not available")

        sale = PricingService.get_active_sale(db, product.id, now)
        on_sale = PricingService.is_on_sale(sale, now)
        unit_price = sale.sale_price if on_sale else product.price

        if product.stock < request.quantity:
            raise insufficient_stock(product.stock)

        if on_sale:
            remaining = PricingService.remaining_sale_quantity(sale)
            if remaining < request.quantity:
                raise ValidationError(
                    f"Insufficient sale quantity. Only {remaining} items available on sale."
                )

        subtotal = Decimal(unit_price) * request.quantity
        delivery_fee = delivery_fee_for(request.delivery_method, subtotal)
        customer = request.customer_info

        order = Order(
            user_id=user_id,
            order_number=OrderService._new_order_number(db),
            status="pending",
            customer_name=customer.name,
            customer_email=customer.email,
            customer_phone=customer.phone,
            customer_address=customer.address or None,
            delivery_method=request.delivery_method,
            payment_method=request.payment_method,
            subtotal=subtotal,
            delivery_fee=delivery_fee,
            total_amount=subtotal + delivery_fee,
            notes=request.notes or None
        )
        order.items.append(OrderItem(
            product_id=product.id,
            product_name=product.name,
            product_price=unit_price,
            quantity=request.quantity,
            total_price=subtotal
        ))
        db.add(order)

        stock = product.stock
        if not OrderService._take_stock(db, product.id, request.quantity):
            db.rollback()
            raise insufficient_stock(stock)

        if on_sale:
            counted = db.query(Sale).filter(
                Sale.id == sale.id,
                Sale.quantity_available - Sale.quantity_sold >= request.quantity
            ).update({
                Sale.quantity_sold: Sale.quantity_sold + request.quantity,
                Sale.updated_at: now
            }, synchronize_session=False)
            if counted != 1:
                db.rollback()
                raise ValidationError("Insufficient sale quantity.")

        db.flush()
        NotificationService.add(
            db, user_id, "order",
            title="Order Placed",
            message=f"Your order #{order.order_number} for {request.quantity}x {product.name} has been placed",
            product_id=product.id,
            product_name=product.name,
            order_id=order.id
        )
        db.commit()
        db.refresh(order)

        logger.info(
            "Order placed",
            extra={"order_id": order.id, "user_id": user_id, "product_id": product.id,
                   "quantity": request.quantity, "on_sale": on_sale,
                   "total_amount": money(order.total_amount)}
        )
        return order

    @staticmethod
    def to_dict(order: Order) -> dict:
        return {
            "id": order.id,
            "orderNumber": order.order_number,
            "status": order.status,
            "customerName": order.customer_name,
            "customerEmail": order.customer_email,
            "customerPhone": order.customer_phone,
            "customerAddress": order.customer_address,
            "deliveryMethod": order.delivery_method,
            "paymentMethod": order.payment_method,
            "subtotal": money(order.subtotal),
            "deliveryFee": money(order.delivery_fee),
            "totalAmount": money(order.total_amount),
            "notes": order.notes,
            "createdAt": order.created_at
        }

    @staticmethod
    def item_to_dict(item: OrderItem) -> dict:
        return {
            "id": item.id,
            "productId": item.product_id,
            "productName": item.product_name,
            "productPrice": money(item.product_price),
            "quantity": item.quantity,
            "totalPrice": money(item.total_price)
        }

    @staticmethod
    def list_user_orders(db: Session, user_id: int, product_id: Optional[int] = None) -> list[dict]:
        """
        The user's orders, newest first, each with its ``itemCount``.

        Args:
            product_id: only orders containing this product
        """
        query = db.query(Order).options(selectinload(Order.items)).filter(Order.user_id == user_id)
        if product_id is not None:
            query = query.filter(Order.items.any(OrderItem.product_id == product_id))

        orders = query.order_by(Order.created_at.desc(), Order.id.desc()).all()
        return [{**OrderService.to_dict(o), "itemCount": len(o.items)} for o in orders]

    @staticmethod
    def get_user_order(db: Session, user_id: int, order_id: int) -> dict:
        """
        The caller's order with its items and the caller's own rating.
        Orders of other users are reported as not found.
        """
        order = db.query(Order).options(selectinload(Order.items)).filter(
            Order.id == order_id,
            Order.user_id == user_id
        ).one_or_none()
        if not order:
            raise NotFoundError("Order")

        rating = db.query(OrderRating).filter(
            OrderRating.order_id == order.id,
            OrderRating.user_id == user_id
        ).one_or_none()

        product_ids = [i.product_id for i in order.items if i.product_id is not None]
        images = dict(db.query(ProductImage.product_id, ProductImage.image_url).filter(
            ProductImage.product_id.in_(product_ids),
            ProductImage.is_primary == True
        ).all()) if product_ids else {}

        items = []
        for item in order.items:
            items.append({
                **OrderService.item_to_dict(item),
                "productImage": images.get(item.product_id) or PLACEHOLDER_IMAGE,
                "userRating": rating.rating if rating else None,
                "userReview": rating.review_text if rating else None
            })

        return {**OrderService.to_dict(order), "items": items}

    @staticmethod
    def list_all_orders(db: Session) -> list[dict]:
        """
        Every order for the admin list, with items folded into a
        ``"2x Brown Eggs, 1x Chick"`` summary.
        """
        orders = db.query(Order).options(selectinload(Order.items)).order_by(
            Order.created_at.desc(), Order.id.desc()
        ).all()

        result = []
        for order in orders:
            summary = ", ".join(f"{i.quantity}x {i.product_name}" for i in order.items)
            result.append({
                **OrderService.to_dict(order),
                "itemCount": len(order.items),
                "items": summary or "No items"
            })
        return result

    @staticmethod
    def _get_order(db: Session, order_id: int) -> Order:
        order = db.query(Order).options(selectinload(Order.items)).filter(
            Order.id == order_id
        ).one_or_none()
        if not order:
            raise NotFoundError("Order")
        return order

    @staticmethod
    def get_order(db: Session, order_id: int) -> dict:
        """Admin view of one order with its item snapshots."""
        order = OrderService._get_order(db, order_id)
        return {
            **OrderService.to_dict(order),
            "updatedAt": order.updated_at,
            "items": [OrderService.item_to_dict(i) for i in order.items]
        }

    @staticmethod
    def build_receipt(db: Session, order_id: int) -> dict:
        """
        Receipt payload: store details from settings, the order header, the
        snapshotted items and the totals.

        Raises:
            NotFoundError: unknown order
        """
        order = OrderService._get_order(db, order_id)
        return {
            "store": {
                "name": settings.STORE_NAME,
                "address": settings.STORE_ADDRESS,
                "phone": settings.STORE_PHONE,
                "email": settings.STORE_EMAIL
            },
            "order": {
                "id": order.id,
                "orderNumber": order.order_number,
                "status": order.status,
                "createdAt": order.created_at,
                "customerName": order.customer_name,
                "customerEmail": order.customer_email,
                "customerPhone": order.customer_phone,
                "customerAddress": order.customer_address,
                "deliveryMethod": order.delivery_method,
                "paymentMethod": order.payment_method,
                "notes": order.notes
            },
            "items": [
                {
                    "name": item.product_name,
                    "price": money(item.product_price),
                    "quantity": item.quantity,
                    "total": money(item.total_price)
                }
                for item in order.items
            ],
            "totals": {
                "subtotal": money(order.subtotal),
                "deliveryFee": money(order.delivery_fee),
                "total": money(order.total_amount)
            }
        }

    @staticmethod
    def update_status(db: Session, order_id: int, new_status: str) -> dict:
        """
        Moves an order to ``new_status``.

        Cancelling puts the ordered quantities back into stock; leaving
        ``cancelled`` takes them out again and fails if stock no longer
        covers them. A real change notifies the order's owner.
        """
        order = db.query(Order).filter(Order.id == order_id).with_for_update().one_or_none()
        if not order:
            raise NotFoundError("Order")

        current = order.status
        stock_updated = False

        if current != new_status:
            items = [i for i in order.items if i.product_id is not None]

            if new_status == "cancelled":
                for item in items:
                    db.query(Product).filter(Product.id == item.product_id).update({
                        Product.stock: Product.stock + item.quantity,
                        Product.updated_at: utc_now()
                    }, synchronize_session=False)
                stock_updated = True

            elif current == "cancelled":
                for item in items:
                    if not OrderService._take_stock(db, item.product_id, item.quantity):
                        available = db.query(Product.stock).filter(Product.id == item.product_id).scalar()
                        db.rollback()
                        raise ValidationError(
                            f"Insufficient stock for product ID {item.product_id}. "
                            f"Available: {available or 0}, Required: {item.quantity}"
                        )
                stock_updated = True

            order.status = new_status
            NotificationService.add(
                db, order.user_id, "order_status",
                title=STATUS_TITLES.get(new_status, "Order Status Updated"),
                message=f"{STATUS_MESSAGES.get(new_status, 'Your order status has been updated')}"
                        f" - Order #{order.order_number}",
                order_id=order.id
            )

        db.commit()

        logger.info(
            "Order status updated",
            extra={"order_id": order_id, "from_status": current, "to_status": new_status,
                   "stock_updated": stock_updated}
        )

        return {
            "success": True,
            "message": f"Order status updated to {new_status}",
            "stockUpdated": stock_updated
        }
