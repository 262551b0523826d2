"""
Domain Services - application layer.

Services contain business logic and orchestrate operations.
They use Repositories for data access.

Structure:
    Router (thin controller)
        ↓
    Service (business logic)  ← YOU ARE HERE
        ↓
    Repository (data access)
        ↓
    Model (entity)

Core pricing and fulfillment:
    CatalogLookup -> OrderPricer -> OrderService
    order_state (transitions) -> SaleAggregator -> SaleService

Usage:
    from food_api.services.domain import OrderService

    service = OrderService(db, deadline)
    order = service.create(body)
"""

from .catalog_lookup import CatalogLookup, PriceQuote
from .order_pricer import CartAddOn, CartLine, OrderPricer, PricedCart, PricedLine
from .order_state import event_for_target, next_status
from .sale_aggregator import SaleAggregator, SettlementRequest, grand_total_cents
from .branch_service import BranchService, TableService
from .category_service import CategoryService
from .menu_service import AddOnService, MenuService
from .order_service import OrderService
from .sale_service import SaleService
from .user_service import UserService

__all__ = [
    # Core
    "CatalogLookup",
    "PriceQuote",
    "OrderPricer",
    "CartLine",
    "CartAddOn",
    "PricedCart",
    "PricedLine",
    "next_status",
    "event_for_target",
    "SaleAggregator",
    "SettlementRequest",
    "grand_total_cents",
    # CRUD
    "BranchService",
    "TableService",
    "CategoryService",
    "MenuService",
    "AddOnService",
    "OrderService",
    "SaleService",
    "UserService",
]
