from .user import User, UserRole
from .addresses import Address
from .products import Product, Category
from .order import Order, OrderItem
from .password_reset import PasswordResetToken
from .site_settings import SiteSettings

__all__ = [
    "User",
    "UserRole",
    "Address",
    "Product",
    "Category",
    "Order",
    "OrderItem",
    "PasswordResetToken",
    "SiteSettings",
]
