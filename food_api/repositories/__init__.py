"""
Repository Pattern implementation.
Centralizes data access with guaranteed eager loading.

Usage:
    from food_api.repositories import OrderRepository, OrderFilters

    repo = OrderRepository(db)
    orders = repo.find_all(OrderFilters(branch_id=1, status="PENDING"))
    order = repo.find_by_id(123)
"""

from .base import BaseRepository, RepositoryFilters
from .catalog import (
    AddOnFilters,
    AddOnRepository,
    BranchRepository,
    CategoryRepository,
    MenuFilters,
    MenuRepository,
    TableRepository,
)
from .order import OrderFilters, OrderRepository
from .sale import SaleFilters, SaleRepository
from .user import UserRepository

__all__ = [
    # Base
    "BaseRepository",
    "RepositoryFilters",
    # Catalog
    "BranchRepository",
    "TableRepository",
    "CategoryRepository",
    "MenuRepository",
    "MenuFilters",
    "AddOnRepository",
    "AddOnFilters",
    # Order
    "OrderRepository",
    "OrderFilters",
    # Sale
    "SaleRepository",
    "SaleFilters",
    # User
    "UserRepository",
]
