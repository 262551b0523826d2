"""
Tests for OrderPricer.
"""

from decimal import Decimal

import pytest
from hypothesis import given, settings, strategies as st

from food_api.services.domain.catalog_lookup import CatalogLookup, PriceQuote
from food_api.services.domain.order_pricer import CartAddOn, CartLine, OrderPricer
from food_shared.config.constants import CatalogKind, Limits
from food_shared.utils.exceptions import (
    CatalogEntryNotFoundError,
    CatalogUnavailableError,
    InvalidAddOnReferenceError,
    InvalidMenuReferenceError,
    InvalidQuantityError,
    ValidationError,
)
from food_shared.utils.money import from_cents


class StaticCatalog:
    """In-memory stand-in for CatalogLookup."""

    def __init__(self, quotes: dict[tuple[str, int], PriceQuote]):
        self._quotes = quotes
        self.calls = 0

    def resolve_price(self, kind, entry_id, *, require_available=True):
        self.calls += 1
        quote = self._quotes.get((kind, entry_id))
        if quote is None:
            raise CatalogEntryNotFoundError(kind, entry_id)
        if require_available and not quote.available:
            raise CatalogUnavailableError(kind, entry_id)
        return quote


def menu_quote(entry_id: int, price_cents: int, discount_cents: int = 0, available: bool = True):
    return PriceQuote(CatalogKind.MENU, entry_id, f"menu {entry_id}", price_cents, discount_cents, available)


def add_on_quote(entry_id: int, price_cents: int, menu_id: int | None = None, available: bool = True):
    return PriceQuote(CatalogKind.ADD_ON, entry_id, f"add-on {entry_id}", price_cents, 0, available, menu_id)


class TestPriceCartAgainstStore:
    def test_reference_scenario_totals_twenty(self, db_session, seed_menu, seed_add_on):
        """M1 10.00 - 1.00 discount, x2, plus A1 2.00 x1 -> 20.00."""
        pricer = OrderPricer(CatalogLookup(db_session))
        cart = [
            CartLine(
                menu_id=seed_menu.id,
                quantity=2,
                add_on_items=(CartAddOn(add_on_id=seed_add_on.id, quantity=1),),
            )
        ]

        priced = pricer.price_cart(cart)

        line = priced.lines[0]
        assert line.unit_price_cents == 1000
        assert line.unit_discount_cents == 100
        assert line.add_on_subtotal_cents == 200
        assert line.subtotal_cents == 2000
        assert from_cents(priced.total_cents) == Decimal("20.00")

    def test_unknown_menu_is_invalid_reference(self, db_session, seed_menu):
        pricer = OrderPricer(CatalogLookup(db_session))
        with pytest.raises(InvalidMenuReferenceError) as exc_info:
            pricer.price_cart([CartLine(menu_id=424242)])
        assert exc_info.value.code == "INVALID_MENU_REFERENCE"
        assert exc_info.value.status_code == 400

    def test_unknown_add_on_is_invalid_reference(self, db_session, seed_menu):
        pricer = OrderPricer(CatalogLookup(db_session))
        cart = [CartLine(menu_id=seed_menu.id, add_on_items=(CartAddOn(add_on_id=424242),))]
        with pytest.raises(InvalidAddOnReferenceError):
            pricer.price_cart(cart)

    def test_add_on_of_another_menu_rejected(self, db_session, seed_add_on, other_menu):
        pricer = OrderPricer(CatalogLookup(db_session))
        cart = [CartLine(menu_id=other_menu.id, add_on_items=(CartAddOn(add_on_id=seed_add_on.id),))]
        with pytest.raises(InvalidAddOnReferenceError):
            pricer.price_cart(cart)

    def test_unavailable_menu_rejected(self, db_session, seed_menu):
        seed_menu.is_available = False
        db_session.commit()
        pricer = OrderPricer(CatalogLookup(db_session))
        with pytest.raises(CatalogUnavailableError):
            pricer.price_cart([CartLine(menu_id=seed_menu.id)])


class TestPriceCartRules:
    def setup_method(self):
        self.catalog = StaticCatalog(
            {
                (CatalogKind.MENU, 1): menu_quote(1, 1000, 100),
                (CatalogKind.MENU, 2): menu_quote(2, 550),
                (CatalogKind.ADD_ON, 10): add_on_quote(10, 200, menu_id=1),
                (CatalogKind.ADD_ON, 11): add_on_quote(11, 75),
                (CatalogKind.ADD_ON, 12): add_on_quote(12, 50, available=False),
            }
        )
        self.pricer = OrderPricer(self.catalog)

    def test_empty_cart_totals_zero(self):
        priced = self.pricer.price_cart([])
        assert priced.total_cents == 0
        assert priced.lines == ()

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_line_quantity(self, quantity):
        with pytest.raises(InvalidQuantityError) as exc_info:
            self.pricer.price_cart([CartLine(menu_id=1, quantity=quantity)])
        assert exc_info.value.code == "INVALID_QUANTITY"

    def test_non_positive_add_on_quantity(self):
        cart = [CartLine(menu_id=1, add_on_items=(CartAddOn(add_on_id=10, quantity=0),))]
        with pytest.raises(InvalidQuantityError):
            self.pricer.price_cart(cart)

    def test_free_standing_add_on_goes_with_any_menu(self):
        cart = [CartLine(menu_id=2, quantity=3, add_on_items=(CartAddOn(add_on_id=11, quantity=2),))]
        priced = self.pricer.price_cart(cart)
        assert priced.total_cents == 550 * 3 + 75 * 2

    def test_unavailable_add_on_rejected(self):
        cart = [CartLine(menu_id=2, add_on_items=(CartAddOn(add_on_id=12),))]
        with pytest.raises(CatalogUnavailableError):
            self.pricer.price_cart(cart)

    def test_fails_fast_on_first_bad_line(self):
        cart = [CartLine(menu_id=1), CartLine(menu_id=99), CartLine(menu_id=2)]
        with pytest.raises(InvalidMenuReferenceError):
            self.pricer.price_cart(cart)

    def test_total_is_sum_of_line_subtotals(self):
        cart = [
            CartLine(menu_id=1, quantity=2, add_on_items=(CartAddOn(add_on_id=10),)),
            CartLine(menu_id=2, quantity=1, note="no onions"),
        ]
        priced = self.pricer.price_cart(cart)
        assert priced.total_cents == sum(line.subtotal_cents for line in priced.lines)
        assert priced.lines[1].note == "no onions"

    def test_each_entry_resolved_once_per_cart(self):
        self.pricer.price_cart([CartLine(menu_id=2)] * 50)
        assert self.catalog.calls == 1


class TestOrderTotalCeiling:
    """The largest cart the API accepts must still fit the money columns."""

    def test_total_at_ceiling_is_accepted(self):
        catalog = StaticCatalog({(CatalogKind.MENU, 1): menu_quote(1, Limits.MAX_ORDER_TOTAL_CENTS)})
        priced = OrderPricer(catalog).price_cart([CartLine(menu_id=1)])
        assert priced.total_cents == Limits.MAX_ORDER_TOTAL_CENTS

    def test_total_above_ceiling_is_rejected(self):
        # Largest Money price times the largest quantity, over the full cart
        catalog = StaticCatalog({(CatalogKind.MENU, 1): menu_quote(1, 999_999_999_999)})
        cart = [CartLine(menu_id=1, quantity=Limits.MAX_LINE_QUANTITY)] * Limits.MAX_CART_LINES
        with pytest.raises(ValidationError) as exc_info:
            OrderPricer(catalog).price_cart(cart)
        assert exc_info.value.code == "INVALID_INPUT"
        assert exc_info.value.status_code == 400

    def test_largest_sale_fits_bigint(self):
        largest_money_cents = 999_999_999_999
        largest_grand_total = Limits.MAX_ORDER_TOTAL_CENTS * Limits.MAX_ORDERS_PER_SALE + largest_money_cents
        assert largest_grand_total <= 2**63 - 1


def test_thousand_one_cent_lines_sum_exactly():
    catalog = StaticCatalog({(CatalogKind.MENU, 1): menu_quote(1, 1)})
    priced = OrderPricer(catalog).price_cart([CartLine(menu_id=1)] * 1000)
    assert from_cents(priced.total_cents) == Decimal("10.00")


@given(
    lines=st.lists(
        st.tuples(
            st.integers(min_value=0, max_value=100_000),   # price cents
            st.integers(min_value=1, max_value=50),        # quantity
            st.integers(min_value=0, max_value=5_000),     # add-on price cents
            st.integers(min_value=0, max_value=5),         # add-on quantity
        ),
        max_size=1000,
    )
)
@settings(max_examples=50, deadline=None)
def test_total_matches_exact_decimal_sum(lines):
    """Property: the total equals the exact decimal sum of line subtotals."""
    quotes = {}
    cart = []
    expected = Decimal("0")
    for index, (price, quantity, add_on_price, add_on_quantity) in enumerate(lines):
        quotes[(CatalogKind.MENU, index)] = menu_quote(index, price)
        quotes[(CatalogKind.ADD_ON, index)] = add_on_quote(index, add_on_price)
        add_ons = (CartAddOn(add_on_id=index, quantity=add_on_quantity),) if add_on_quantity else ()
        cart.append(CartLine(menu_id=index, quantity=quantity, add_on_items=add_ons))
        expected += Decimal(price) / 100 * quantity + Decimal(add_on_price) / 100 * add_on_quantity

    priced = OrderPricer(StaticCatalog(quotes)).price_cart(cart)

    assert from_cents(priced.total_cents) == expected
