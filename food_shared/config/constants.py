"""
Centralized constants for the backend application.

Usage:
    from food_shared.config.constants import Roles, OrderStatus

    if Roles.rank(role) >= Roles.rank(Roles.MANAGER):
        ...

    if order.status == OrderStatus.PENDING:
        ...
"""

from typing import Final


# =============================================================================
# User Roles
# =============================================================================


class Roles:
    """
    User role constants.

    Ranks follow the numeric role codes
    (0 staff, 1 assistant, 2 manager, 3 owner, 100 root).
    """

    STAFF: Final[str] = "STAFF"          # waiter or chef
    ASSISTANT: Final[str] = "ASSISTANT"
    MANAGER: Final[str] = "MANAGER"
    OWNER: Final[str] = "OWNER"
    ROOT: Final[str] = "ROOT"

    ALL: Final[list[str]] = [STAFF, ASSISTANT, MANAGER, OWNER, ROOT]

    _RANKS: Final[dict[str, int]] = {
        STAFF: 0,
        ASSISTANT: 1,
        MANAGER: 2,
        OWNER: 3,
        ROOT: 100,
    }

    @classmethod
    def rank(cls, role: str | None) -> int:
        """Numeric rank of a role; unknown roles rank below STAFF."""
        if role is None:
            return -1
        return cls._RANKS.get(role, -1)

    @classmethod
    def at_least(cls, role: str | None, minimum: str) -> bool:
        return cls.rank(role) >= cls.rank(minimum)


# =============================================================================
# Order Status
# =============================================================================


class OrderStatus:
    """Order status constants."""

    PENDING: Final[str] = "PENDING"
    IN_PROGRESS: Final[str] = "IN_PROGRESS"
    COMPLETED: Final[str] = "COMPLETED"
    CANCELLED: Final[str] = "CANCELLED"

    ALL: Final[list[str]] = [PENDING, IN_PROGRESS, COMPLETED, CANCELLED]
    OPEN: Final[list[str]] = [PENDING, IN_PROGRESS]
    TERMINAL: Final[list[str]] = [COMPLETED, CANCELLED]
    # Orders in these states may be hard-deleted
    DELETABLE: Final[list[str]] = [PENDING, CANCELLED]


class OrderEvent:
    """Events accepted by the order state machine."""

    START: Final[str] = "start"
    CANCEL: Final[str] = "cancel"
    COMPLETE: Final[str] = "complete"


class CatalogKind:
    """Catalog entry kinds resolvable by the catalog lookup."""

    MENU: Final[str] = "MENU"
    ADD_ON: Final[str] = "ADD_ON"


# =============================================================================
# Limits
# =============================================================================


class Limits:
    """Pagination and input limits."""

    DEFAULT_PAGE_SIZE: Final[int] = 50
    MAX_PAGE_SIZE: Final[int] = 200
    MAX_SEARCH_TERM_LENGTH: Final[int] = 100

    MAX_CART_LINES: Final[int] = 1000
    MAX_LINE_QUANTITY: Final[int] = 999
    MAX_ORDERS_PER_SALE: Final[int] = 200
    # Money columns are BIGINT; 200 orders at the ceiling still fit
    MAX_ORDER_TOTAL_CENTS: Final[int] = 10**15 - 1

    MIN_PASSWORD_LENGTH: Final[int] = 6
    VERIFICATION_CODE_DIGITS: Final[int] = 6

    MAX_UPLOAD_BYTES: Final[int] = 5 * 1024 * 1024
    ALLOWED_IMAGE_TYPES: Final[frozenset[str]] = frozenset(
        {"image/jpeg", "image/png", "image/webp"}
    )
