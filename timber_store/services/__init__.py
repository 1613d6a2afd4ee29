from .account_service import AccountService, CustomerService
from .cart_service import CartService
from .catalog_service import CatalogService
from .order_service import OrderResult, OrderService, ShippingDetails

__all__ = [
    "AccountService",
    "CartService",
    "CatalogService",
    "CustomerService",
    "OrderResult",
    "OrderService",
    "ShippingDetails",
]
