"""
Configuration module: Settings, logging, constants.
"""

from food_shared.config.settings import settings, DATABASE_URL
from food_shared.config.logging import get_logger, setup_logging
from food_shared.config.constants import (
    Roles,
    OrderStatus,
    CatalogKind,
    Limits,
)

__all__ = [
    # settings
    "settings",
    "DATABASE_URL",
    # logging
    "get_logger",
    "setup_logging",
    # constants
    "Roles",
    "OrderStatus",
    "CatalogKind",
    "Limits",
]
