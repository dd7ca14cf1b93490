from models.users import User
from models.categories import Category
from models.products import Product
from models.product_images import ProductImage
from models.sales import Sale
from models.cart_items import CartItem
from models.favorites import Favorite
from models.orders import Order
from models.order_items import OrderItem
from models.order_ratings import OrderRating, OrderRatingImage
from models.notifications import Notification

__all__ = ["User", "Category", "Product", "ProductImage", "Sale", "CartItem", "Favorite",
           "Order", "OrderItem", "OrderRating", "OrderRatingImage", "Notification"]
