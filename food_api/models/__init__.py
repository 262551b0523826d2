"""
SQLAlchemy ORM Models Package.

- base: Base class, BigIntId, TimestampMixin
- branch: Branch, Table
- catalog: Category, MenuItem, AddOn
- order: Order, OrderLine, OrderLineAddOn
- sale: Sale, SaleOrder
- user: User
"""

from .base import Base, BigIntId, TimestampMixin
from .branch import Branch, Table
from .catalog import Category, MenuItem, AddOn
from .order import Order, OrderLine, OrderLineAddOn
from .sale import Sale, SaleOrder
from .user import User

__all__ = [
    "Base",
    "BigIntId",
    "TimestampMixin",
    "Branch",
    "Table",
    "Category",
    "MenuItem",
    "AddOn",
    "Order",
    "OrderLine",
    "OrderLineAddOn",
    "Sale",
    "SaleOrder",
    "User",
]
