"""
Catalog Lookup.

Resolves the current price of a menu item or add-on. Read-only: two calls
with the same id and no catalog change in between return equal quotes.
"""

from dataclasses import dataclass

from sqlalchemy.orm import Session

from food_shared.config.constants import CatalogKind
from food_shared.config.logging import get_logger
from food_shared.infrastructure.db import store_step
from food_shared.infrastructure.deadline import Deadline
from food_shared.utils.exceptions import CatalogEntryNotFoundError, CatalogUnavailableError, ValidationError
from food_api.models import AddOn, MenuItem

logger = get_logger(__name__)


@dataclass(frozen=True)
class PriceQuote:
    """Current price of one catalog entry, in cents."""

    kind: str
    entry_id: int
    title: str
    price_cents: int
    discount_cents: int
    available: bool
    # Menu an add-on is tied to; None for menus and free-standing add-ons
    menu_id: int | None = None

    @property
    def net_price_cents(self) -> int:
        return self.price_cents - self.discount_cents


class CatalogLookup:
    """
    Price resolution against the catalog tables.

    Usage:
        lookup = CatalogLookup(db, deadline)
        quote = lookup.resolve_price(CatalogKind.MENU, menu_id)
    """

    def __init__(self, db: Session, deadline: Deadline | None = None):
        self._db = db
        self._deadline = deadline

    def resolve_price(
        self,
        kind: str,
        entry_id: int,
        *,
        require_available: bool = True,
    ) -> PriceQuote:
        """
        Resolve the price of a catalog entry.

        Raises:
            CatalogEntryNotFoundError: No entry of ``kind`` has this id.
            CatalogUnavailableError: The entry is unavailable and
                ``require_available`` is set.
        """
        if kind == CatalogKind.MENU:
            quote = self._resolve_menu(entry_id)
        elif kind == CatalogKind.ADD_ON:
            quote = self._resolve_add_on(entry_id)
        else:
            raise ValidationError(f"Unknown catalog kind: {kind}", kind=kind)

        if require_available and not quote.available:
            raise CatalogUnavailableError(kind, entry_id)
        return quote

    def _resolve_menu(self, menu_id: int) -> PriceQuote:
        with store_step(self._db, "resolve menu price", self._deadline):
            menu = self._db.get(MenuItem, menu_id)
        if menu is None:
            raise CatalogEntryNotFoundError(CatalogKind.MENU, menu_id)
        return PriceQuote(
            kind=CatalogKind.MENU,
            entry_id=menu.id,
            title=menu.title,
            price_cents=menu.price_cents,
            discount_cents=menu.discount_cents,
            available=menu.is_available,
        )

    def _resolve_add_on(self, add_on_id: int) -> PriceQuote:
        with store_step(self._db, "resolve add-on price", self._deadline):
            add_on = self._db.get(AddOn, add_on_id)
        if add_on is None:
            raise CatalogEntryNotFoundError(CatalogKind.ADD_ON, add_on_id)
        return PriceQuote(
            kind=CatalogKind.ADD_ON,
            entry_id=add_on.id,
            title=add_on.title,
            price_cents=add_on.price_cents,
            discount_cents=0,
            available=add_on.is_available,
            menu_id=add_on.menu_id,
        )
