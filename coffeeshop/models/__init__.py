"""Models package - exports all SQLAlchemy models."""
from coffeeshop.models.account import Account

# Catalog
from coffeeshop.models.category import Category
from coffeeshop.models.product import Product, effective_price
from coffeeshop.models.size import Size
from coffeeshop.models.variant import Variant

# Checkout
from coffeeshop.models.cart_item import CartItem
from coffeeshop.models.delivery import Delivery
from coffeeshop.models.payment_method import PaymentMethod
from coffeeshop.models.order import Order, OrderStatus, format_order_number
from coffeeshop.models.order_line import OrderLine

__all__ = [
    'Account',
    'Category', 'Product', 'effective_price', 'Size', 'Variant',
    'CartItem', 'Delivery', 'PaymentMethod',
    'Order', 'OrderStatus', 'format_order_number', 'OrderLine',
]
