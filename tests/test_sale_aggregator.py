"""
Tests for SaleAggregator settlement.
"""

import pytest
from hypothesis import given, strategies as st
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from food_api.models import Order, Sale, SaleOrder
from food_api.services.domain import sale_aggregator
from food_api.services.domain.sale_aggregator import (
    SaleAggregator,
    SettlementRequest,
    grand_total_cents,
)
from food_shared.config.constants import OrderStatus
from food_shared.infrastructure.deadline import Deadline
from food_shared.utils.exceptions import (
    InvalidBranchError,
    InvalidTableError,
    InvalidTransitionError,
    OrderNotFoundError,
    StoreTimeoutError,
    UpstreamError,
    ValidationError,
)


def sale_count(db) -> int:
    return db.scalar(select(func.count()).select_from(Sale))


def request_for(branch, table, order_ids, **kwargs) -> SettlementRequest:
    return SettlementRequest(branch_id=branch.id, table_id=table.id, order_ids=tuple(order_ids), **kwargs)


def assert_untouched(db, order_id: int, status: str = OrderStatus.IN_PROGRESS):
    order = db.get(Order, order_id)
    db.refresh(order)
    assert order.status == status
    assert order.is_paid is False


class TestSettle:
    def test_reference_scenario(self, db_session, seed_branch, seed_table, make_order):
        """60.00 + 40.00 - 10.00 discount + 5.00 tax = 95.00."""
        o1 = make_order(6000)
        o2 = make_order(4000)

        sale = SaleAggregator(db_session).settle(
            request_for(seed_branch, seed_table, [o1.id, o2.id], discount_cents=1000, tax_cents=500)
        )

        assert sale.total_cents == 10000
        assert sale.grand_total_cents == 9500
        assert sale.order_ids == [o1.id, o2.id]
        for order_id in (o1.id, o2.id):
            order = db_session.get(Order, order_id)
            assert order.status == OrderStatus.COMPLETED
            assert order.is_paid is True

    def test_links_keep_request_order_and_totals(self, db_session, seed_branch, seed_table, make_order):
        first = make_order(300)
        second = make_order(700)

        sale = SaleAggregator(db_session).settle(request_for(seed_branch, seed_table, [second.id, first.id]))

        links = db_session.scalars(select(SaleOrder).where(SaleOrder.sale_id == sale.id)).all()
        assert [(link.order_id, link.order_total_cents) for link in sorted(links, key=lambda l: l.position)] == [
            (second.id, 700),
            (first.id, 300),
        ]

    def test_discount_larger_than_bill_gives_negative_grand_total(
        self, db_session, seed_branch, seed_table, make_order
    ):
        order = make_order(500)
        sale = SaleAggregator(db_session).settle(
            request_for(seed_branch, seed_table, [order.id], discount_cents=800)
        )
        assert sale.grand_total_cents == -300

    def test_payment_method_and_note_stored(self, db_session, seed_branch, seed_table, make_order):
        order = make_order()
        sale = SaleAggregator(db_session).settle(
            request_for(seed_branch, seed_table, [order.id], payment_method="CARD", note="window seat")
        )
        assert sale.payment_method == "CARD"
        assert sale.note == "window seat"


class TestSettleIsAllOrNothing:
    def test_missing_order_leaves_others_untouched(self, db_session, seed_branch, seed_table, make_order):
        o1 = make_order(6000)

        with pytest.raises(OrderNotFoundError):
            SaleAggregator(db_session).settle(request_for(seed_branch, seed_table, [o1.id, 987654]))

        assert_untouched(db_session, o1.id)
        assert sale_count(db_session) == 0

    def test_pending_order_is_invalid_transition(self, db_session, seed_branch, seed_table, make_order):
        ready = make_order(1000)
        pending = make_order(1000, status=OrderStatus.PENDING)

        with pytest.raises(InvalidTransitionError) as exc_info:
            SaleAggregator(db_session).settle(request_for(seed_branch, seed_table, [ready.id, pending.id]))

        assert exc_info.value.partial is False
        assert_untouched(db_session, ready.id)
        assert_untouched(db_session, pending.id, OrderStatus.PENDING)
        assert sale_count(db_session) == 0

    def test_already_completed_order_rejected(self, db_session, seed_branch, seed_table, make_order):
        done = make_order(status=OrderStatus.COMPLETED)
        with pytest.raises(InvalidTransitionError):
            SaleAggregator(db_session).settle(request_for(seed_branch, seed_table, [done.id]))

    def test_order_of_another_branch_rejected(
        self, db_session, seed_branch, seed_table, other_branch, make_order
    ):
        from food_api.models import Table

        far_table = Table(branch_id=other_branch.id, name="B-01", capacity=2)
        db_session.add(far_table)
        db_session.commit()
        local = make_order()
        foreign = make_order(branch_id=other_branch.id, table_id=far_table.id)

        with pytest.raises(ValidationError):
            SaleAggregator(db_session).settle(request_for(seed_branch, seed_table, [local.id, foreign.id]))

        assert_untouched(db_session, local.id)
        assert sale_count(db_session) == 0

    def test_store_failure_during_insert_rolls_back(
        self, db_session, seed_branch, seed_table, make_order, monkeypatch
    ):
        order = make_order()

        def failing_commit(db):
            raise OperationalError("INSERT INTO sale", {}, Exception("connection lost"))

        monkeypatch.setattr(sale_aggregator, "safe_commit", failing_commit)

        with pytest.raises(UpstreamError) as exc_info:
            SaleAggregator(db_session).settle(request_for(seed_branch, seed_table, [order.id]))

        assert exc_info.value.step == "insert sale"
        assert exc_info.value.retriable is False
        assert exc_info.value.partial is False
        assert_untouched(db_session, order.id)
        assert sale_count(db_session) == 0

    def test_expired_deadline_stores_nothing(self, db_session, seed_branch, seed_table, make_order):
        order = make_order()

        with pytest.raises(StoreTimeoutError) as exc_info:
            SaleAggregator(db_session, Deadline.after(0)).settle(request_for(seed_branch, seed_table, [order.id]))

        assert exc_info.value.retriable is True
        assert exc_info.value.status_code == 504
        assert_untouched(db_session, order.id)
        assert sale_count(db_session) == 0

    def test_reload_failure_after_commit_is_partial(
        self, db_session, seed_branch, seed_table, make_order, monkeypatch
    ):
        order = make_order()

        def failing_refresh(instance, *args, **kwargs):
            raise OperationalError("SELECT sale", {}, Exception("connection lost"))

        monkeypatch.setattr(db_session, "refresh", failing_refresh)

        with pytest.raises(UpstreamError) as exc_info:
            SaleAggregator(db_session).settle(request_for(seed_branch, seed_table, [order.id]))
        monkeypatch.undo()

        assert exc_info.value.step == "reload sale"
        assert exc_info.value.partial is True
        assert exc_info.value.retriable is False
        # The settlement itself is stored
        assert sale_count(db_session) == 1
        db_session.expire_all()
        stored = db_session.get(Order, order.id)
        assert stored.status == OrderStatus.COMPLETED
        assert stored.is_paid is True


class TestSettleValidation:
    def test_unknown_branch(self, db_session, seed_table, make_order):
        order = make_order()
        request = SettlementRequest(branch_id=99999, table_id=seed_table.id, order_ids=(order.id,))
        with pytest.raises(InvalidBranchError):
            SaleAggregator(db_session).settle(request)

    def test_table_of_another_branch(self, db_session, seed_table, other_branch, make_order):
        order = make_order()
        request = SettlementRequest(branch_id=other_branch.id, table_id=seed_table.id, order_ids=(order.id,))
        with pytest.raises(InvalidTableError):
            SaleAggregator(db_session).settle(request)

    def test_empty_order_list(self, db_session, seed_branch, seed_table):
        with pytest.raises(ValidationError):
            SaleAggregator(db_session).settle(request_for(seed_branch, seed_table, []))

    def test_duplicate_order_ids(self, db_session, seed_branch, seed_table, make_order):
        order = make_order()
        with pytest.raises(ValidationError):
            SaleAggregator(db_session).settle(request_for(seed_branch, seed_table, [order.id, order.id]))
        assert_untouched(db_session, order.id)

    @pytest.mark.parametrize("field", ["discount_cents", "tax_cents"])
    def test_negative_adjustments_rejected(self, db_session, seed_branch, seed_table, make_order, field):
        order = make_order()
        with pytest.raises(ValidationError):
            SaleAggregator(db_session).settle(request_for(seed_branch, seed_table, [order.id], **{field: -1}))


@given(
    totals=st.lists(st.integers(min_value=0, max_value=10_000_000), min_size=1, max_size=200),
    discount=st.integers(min_value=0, max_value=10_000_000),
    tax=st.integers(min_value=0, max_value=10_000_000),
)
def test_grand_total_identity(totals, discount, tax):
    """Property: grand total is exactly total - discount + tax."""
    total = sum(totals)
    assert grand_total_cents(total, discount, tax) == total - discount + tax
    assert grand_total_cents(total, 0, 0) == total
