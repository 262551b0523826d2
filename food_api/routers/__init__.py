"""
API routers.
"""

from .add_ons import router as add_ons_router
from .auth import router as auth_router
from .branches import router as branches_router
from .categories import router as categories_router
from .health import router as health_router
from .menus import router as menus_router
from .orders import router as orders_router
from .sales import router as sales_router
from .users import router as users_router

__all__ = [
    "add_ons_router",
    "auth_router",
    "branches_router",
    "categories_router",
    "health_router",
    "menus_router",
    "orders_router",
    "sales_router",
    "users_router",
]
