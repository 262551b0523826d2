"""
Order Pricer.

Turns a cart into priced lines and an order total. All arithmetic is on
integer cents, so summing any number of lines is exact.

    line_subtotal = (price - discount) * quantity + sum(add_on_price * add_on_quantity)
    total = sum(line_subtotal)
"""

from dataclasses import dataclass, field

from food_shared.config.constants import CatalogKind, Limits
from food_shared.config.logging import get_logger
from food_shared.utils.exceptions import (
    CatalogEntryNotFoundError,
    InvalidAddOnReferenceError,
    InvalidMenuReferenceError,
    InvalidQuantityError,
    ValidationError,
)
from .catalog_lookup import CatalogLookup, PriceQuote

logger = get_logger(__name__)


# =============================================================================
# Cart (input) and priced (output) types
# =============================================================================


@dataclass(frozen=True)
class CartAddOn:
    add_on_id: int
    quantity: int = 1
    note: str | None = None


@dataclass(frozen=True)
class CartLine:
    menu_id: int
    quantity: int = 1
    add_on_items: tuple[CartAddOn, ...] = ()
    note: str | None = None


@dataclass(frozen=True)
class PricedAddOn:
    add_on_id: int
    title: str
    quantity: int
    unit_price_cents: int
    subtotal_cents: int
    note: str | None = None


@dataclass(frozen=True)
class PricedLine:
    menu_id: int
    title: str
    quantity: int
    unit_price_cents: int
    unit_discount_cents: int
    add_on_subtotal_cents: int
    subtotal_cents: int
    add_ons: tuple[PricedAddOn, ...] = ()
    note: str | None = None


@dataclass(frozen=True)
class PricedCart:
    lines: tuple[PricedLine, ...] = field(default_factory=tuple)
    total_cents: int = 0


# =============================================================================
# Pricer
# =============================================================================


class OrderPricer:
    """
    Prices carts against the catalog, failing fast on the first bad line.

    Unavailable menu items and add-ons are rejected.
    """

    def __init__(self, lookup: CatalogLookup):
        self._lookup = lookup

    def price_cart(self, cart: list[CartLine]) -> PricedCart:
        """
        Price every line of the cart.

        Raises:
            InvalidQuantityError: A line or add-on quantity is not positive.
            InvalidMenuReferenceError: A menu id does not resolve.
            InvalidAddOnReferenceError: An add-on id does not resolve or is
                tied to a different menu.
            CatalogUnavailableError: A referenced entry is unavailable.
            ValidationError: The total exceeds ``Limits.MAX_ORDER_TOTAL_CENTS``.
        """
        # Quotes are stable within one pricing pass
        quotes: dict[tuple[str, int], PriceQuote] = {}
        lines = tuple(self._price_line(line, quotes) for line in cart)
        total = sum(line.subtotal_cents for line in lines)
        if total > Limits.MAX_ORDER_TOTAL_CENTS:
            raise ValidationError("Order total exceeds the allowed maximum", total_cents=total)
        logger.debug("Cart priced", lines=len(lines), total_cents=total)
        return PricedCart(lines=lines, total_cents=total)

    def _quote(self, kind: str, entry_id: int, quotes: dict[tuple[str, int], PriceQuote]) -> PriceQuote:
        key = (kind, entry_id)
        if key not in quotes:
            quotes[key] = self._lookup.resolve_price(kind, entry_id)
        return quotes[key]

    def _price_line(self, line: CartLine, quotes: dict[tuple[str, int], PriceQuote]) -> PricedLine:
        if line.quantity <= 0:
            raise InvalidQuantityError(line.quantity, menu_id=line.menu_id)

        try:
            menu = self._quote(CatalogKind.MENU, line.menu_id, quotes)
        except CatalogEntryNotFoundError as exc:
            raise InvalidMenuReferenceError(line.menu_id) from exc

        line_base = menu.net_price_cents * line.quantity

        add_ons = tuple(self._price_add_on(line, item, quotes) for item in line.add_on_items)
        add_on_subtotal = sum(item.subtotal_cents for item in add_ons)

        return PricedLine(
            menu_id=menu.entry_id,
            title=menu.title,
            quantity=line.quantity,
            unit_price_cents=menu.price_cents,
            unit_discount_cents=menu.discount_cents,
            add_on_subtotal_cents=add_on_subtotal,
            subtotal_cents=line_base + add_on_subtotal,
            add_ons=add_ons,
            note=line.note,
        )

    def _price_add_on(
        self,
        line: CartLine,
        item: CartAddOn,
        quotes: dict[tuple[str, int], PriceQuote],
    ) -> PricedAddOn:
        if item.quantity <= 0:
            raise InvalidQuantityError(item.quantity, add_on_id=item.add_on_id)

        try:
            add_on = self._quote(CatalogKind.ADD_ON, item.add_on_id, quotes)
        except CatalogEntryNotFoundError as exc:
            raise InvalidAddOnReferenceError(item.add_on_id) from exc

        if add_on.menu_id is not None and add_on.menu_id != line.menu_id:
            raise InvalidAddOnReferenceError(
                item.add_on_id,
                reason=f"belongs to menu {add_on.menu_id}",
            )

        return PricedAddOn(
            add_on_id=add_on.entry_id,
            title=add_on.title,
            quantity=item.quantity,
            unit_price_cents=add_on.price_cents,
            subtotal_cents=add_on.price_cents * item.quantity,
            note=item.note,
        )
