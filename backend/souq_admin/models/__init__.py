from .catalog import Category, Product, ProductReview
from .customers import Customer
from .orders import Order, OrderItem, ORDER_STATUSES, PAYMENT_STATUSES
from .commerce import Coupon, Currency, PaymentMethod, DISCOUNT_TYPES
from .content import StoreSettings, HeroSettings, FooterSection, FooterLink, Page
from .auth import AdminUser, ADMIN_ROLES

# Logical table name -> model. The data store resolves every table through this map.
TABLES = {
    "categories": Category,
    "products": Product,
    "product_reviews": ProductReview,
    "customers": Customer,
    "orders": Order,
    "order_items": OrderItem,
    "coupons": Coupon,
    "currencies": Currency,
    "payment_methods": PaymentMethod,
    "store_settings": StoreSettings,
    "hero_settings": HeroSettings,
    "footer_sections": FooterSection,
    "footer_links": FooterLink,
    "pages": Page,
    "admin_users": AdminUser,
}

__all__ = [
    'Category', 'Product', 'ProductReview',
    'Customer',
    'Order', 'OrderItem', 'ORDER_STATUSES', 'PAYMENT_STATUSES',
    'Coupon', 'Currency', 'PaymentMethod', 'DISCOUNT_TYPES',
    'StoreSettings', 'HeroSettings', 'FooterSection', 'FooterLink', 'Page',
    'AdminUser', 'ADMIN_ROLES',
    'TABLES',
]
