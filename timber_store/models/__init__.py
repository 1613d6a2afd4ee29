from .base import Base
from .cart_item import CartItem
from .customer import Customer
from .order import Order
from .order_item import OrderItem
from .product import Product
from .user import User

__all__ = ["Base", "CartItem", "Customer", "Order", "OrderItem", "Product", "User"]
