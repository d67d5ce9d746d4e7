# barpoints/models/__init__.py
from barpoints.models.venue import City, Bar
from barpoints.models.user import User, Role
from barpoints.models.catalog import Brand, Category, Product, Prize
from barpoints.models.sale import Sale
from barpoints.models.ledger import LedgerEntry, LedgerType
from barpoints.models.cart import Cart, CartItem
from barpoints.models.order import Order, OrderItem, OrderStatusEntry, OrderStatus
from barpoints.models.withdrawal import WithdrawalRequest, WithdrawalStatus
from barpoints.models.achievement import AchievementUnlock
from barpoints.models.settings_model import ProgramSettings

__all__ = [
    "City",
    "Bar",
    "User",
    "Role",
    "Brand",
    "Category",
    "Product",
    "Prize",
    "Sale",
    "LedgerEntry",
    "LedgerType",
    "Cart",
    "CartItem",
    "Order",
    "OrderItem",
    "OrderStatusEntry",
    "OrderStatus",
    "WithdrawalRequest",
    "WithdrawalStatus",
    "AchievementUnlock",
    "ProgramSettings",
]
