"""
Sale Aggregator.

Settles a set of orders into one Sale. Settlement is all-or-nothing:
every referenced order is locked and validated before any of them is
touched, and the order transitions plus the sale insert commit together.
A failure before the commit leaves no order transitioned and no sale
stored.
"""

from dataclasses import dataclass

from sqlalchemy.orm import Session

from food_shared.config.constants import OrderEvent
from food_shared.config.logging import sale_logger as logger
from food_shared.infrastructure.db import safe_commit, store_step
from food_shared.infrastructure.deadline import Deadline
from food_shared.utils.exceptions import (
    InvalidBranchError,
    InvalidTableError,
    InvalidTransitionError,
    OrderNotFoundError,
    ValidationError,
)
from food_api.models import Branch, Order, Sale, SaleOrder, Table
from food_api.repositories import OrderRepository
from .order_state import can_apply, next_status


def grand_total_cents(total_cents: int, discount_cents: int, tax_cents: int) -> int:
    """Grand total of a sale. May be negative when the discount exceeds the bill."""
    return total_cents - discount_cents + tax_cents


@dataclass(frozen=True)
class SettlementRequest:
    branch_id: int
    table_id: int
    order_ids: tuple[int, ...]
    discount_cents: int = 0
    tax_cents: int = 0
    payment_method: str | None = None
    note: str | None = None


class SaleAggregator:
    """
    Usage:
        sale = SaleAggregator(db, deadline).settle(request)
    """

    def __init__(self, db: Session, deadline: Deadline | None = None):
        self._db = db
        self._deadline = deadline
        self._orders = OrderRepository(db)

    def settle(self, request: SettlementRequest) -> Sale:
        """
        Complete and mark paid every listed order, then persist the sale.

        Raises:
            InvalidBranchError / InvalidTableError: Unknown branch or table,
                or the table is not part of the branch.
            ValidationError: Empty or duplicated order ids, negative
                discount or tax, or an order of another branch.
            OrderNotFoundError: A listed order does not exist.
            InvalidTransitionError: A listed order is not IN_PROGRESS.
            StoreTimeoutError / UpstreamError: The store failed. Before the
                commit nothing is stored; a failure while reloading the
                committed sale reports ``partial=True``, not retriable.
        """
        try:
            self._validate_references(request)
            orders = self._lock_orders(request)
            sale = self._apply(request, orders)
            with store_step(self._db, "insert sale", self._deadline, write=True):
                self._db.add(sale)
                safe_commit(self._db)
        except Exception:
            self._db.rollback()
            raise

        with store_step(self._db, "reload sale", self._deadline, committed=True):
            self._db.refresh(sale)
            order_ids = sale.order_ids

        logger.info(
            "Sale settled",
            sale_id=sale.id,
            branch_id=sale.branch_id,
            order_ids=order_ids,
            grand_total_cents=sale.grand_total_cents,
        )
        return sale

    # =========================================================================
    # Steps
    # =========================================================================

    def _validate_references(self, request: SettlementRequest) -> None:
        with store_step(self._db, "validate branch", self._deadline):
            branch = self._db.get(Branch, request.branch_id)
        if branch is None:
            raise InvalidBranchError(request.branch_id)

        with store_step(self._db, "validate table", self._deadline):
            table = self._db.get(Table, request.table_id)
        if table is None:
            raise InvalidTableError(request.table_id)
        if table.branch_id != request.branch_id:
            raise InvalidTableError(request.table_id, reason=f"not in branch {request.branch_id}")

        if not request.order_ids:
            raise ValidationError("A sale must reference at least one order")
        if len(set(request.order_ids)) != len(request.order_ids):
            raise ValidationError("Duplicate order ids in sale", order_ids=list(request.order_ids))
        if request.discount_cents < 0 or request.tax_cents < 0:
            raise ValidationError("Discount and tax must not be negative")

    def _lock_orders(self, request: SettlementRequest) -> list[Order]:
        """Lock every listed order and check it can be completed. Mutates nothing."""
        with store_step(self._db, "lock orders", self._deadline, write=True):
            found = self._orders.find_for_settlement(list(request.order_ids))

        orders = []
        for order_id in request.order_ids:
            order = found.get(order_id)
            if order is None:
                raise OrderNotFoundError(order_id)
            if order.branch_id != request.branch_id:
                raise ValidationError(
                    f"Order {order_id} belongs to another branch",
                    order_id=order_id,
                    branch_id=order.branch_id,
                )
            if not can_apply(order.status, OrderEvent.COMPLETE):
                raise InvalidTransitionError("order", order.status, OrderEvent.COMPLETE, order_id=order_id)
            orders.append(order)
        return orders

    def _apply(self, request: SettlementRequest, orders: list[Order]) -> Sale:
        total = 0
        links = []
        for position, order in enumerate(orders):
            order.status = next_status(order.status, OrderEvent.COMPLETE, allow_complete=True)
            order.is_paid = True
            total += order.total_cents
            links.append(
                SaleOrder(
                    order_id=order.id,
                    position=position,
                    order_total_cents=order.total_cents,
                )
            )

        return Sale(
            branch_id=request.branch_id,
            table_id=request.table_id,
            total_cents=total,
            discount_cents=request.discount_cents,
            tax_cents=request.tax_cents,
            grand_total_cents=grand_total_cents(total, request.discount_cents, request.tax_cents),
            payment_method=request.payment_method,
            note=request.note,
            order_links=links,
        )
