# Import every model so Base.metadata and string relationships are complete
from bakery.models.users import User
from bakery.models.categories import Category
from bakery.models.inventory import InventoryItem, InventoryTransaction
from bakery.models.products import Product, ProductIngredient
from bakery.models.parties import Party
from bakery.models.customers import Customer
from bakery.models.purchases import Purchase, PurchaseItem
from bakery.models.production import ProductionScheduleItem
from bakery.models.orders import Order
from bakery.models.order_items import OrderItem
from bakery.models.expenses import Expense
from bakery.models.settings import Setting

__all__ = [
    "User",
    "Category",
    "InventoryItem",
    "InventoryTransaction",
    "Product",
    "ProductIngredient",
    "Party",
    "Customer",
    "Purchase",
    "PurchaseItem",
    "ProductionScheduleItem",
    "Order",
    "OrderItem",
    "Expense",
    "Setting",
]
