"""
Order Domain Service.

Handles order placement (pricing a cart and storing its snapshot),
status updates through the state machine, and deletion.
"""

from typing import Any

from sqlalchemy.orm import Session

from food_api.models import Branch, Order, OrderLine, OrderLineAddOn, Table
from food_api.repositories import OrderFilters, OrderRepository
from food_shared.config.constants import OrderStatus
from food_shared.config.logging import order_logger as logger
from food_shared.infrastructure.db import safe_commit, store_step
from food_shared.infrastructure.deadline import Deadline
from food_shared.utils.exceptions import (
    ConflictError,
    InvalidBranchError,
    InvalidTableError,
    OrderNotFoundError,
)
from food_shared.utils.schemas import OrderCreate, OrderOutput, OrderUpdate
from .catalog_lookup import CatalogLookup
from .order_pricer import CartAddOn, CartLine, OrderPricer, PricedCart
from .order_state import event_for_target, next_status


def cart_from_request(body: OrderCreate) -> list[CartLine]:
    """Convert the wire cart into pricer input."""
    return [
        CartLine(
            menu_id=item.menu_id,
            quantity=item.quantity,
            add_on_items=tuple(
                CartAddOn(add_on_id=a.add_on_id, quantity=a.quantity, note=a.note)
                for a in item.add_on_items
            ),
            note=item.note,
        )
        for item in body.menu_items
    ]


def build_order(branch_id: int, table_id: int, priced: PricedCart, note: str | None) -> Order:
    """Order entity holding the priced snapshot. The total is fixed here."""
    lines = []
    for position, line in enumerate(priced.lines):
        lines.append(
            OrderLine(
                position=position,
                menu_id=line.menu_id,
                menu_title=line.title,
                quantity=line.quantity,
                unit_price_cents=line.unit_price_cents,
                unit_discount_cents=line.unit_discount_cents,
                add_on_subtotal_cents=line.add_on_subtotal_cents,
                subtotal_cents=line.subtotal_cents,
                note=line.note,
                add_ons=[
                    OrderLineAddOn(
                        add_on_id=item.add_on_id,
                        add_on_title=item.title,
                        quantity=item.quantity,
                        unit_price_cents=item.unit_price_cents,
                        subtotal_cents=item.subtotal_cents,
                        note=item.note,
                    )
                    for item in line.add_ons
                ],
            )
        )
    return Order(
        branch_id=branch_id,
        table_id=table_id,
        total_cents=priced.total_cents,
        status=OrderStatus.PENDING,
        is_paid=False,
        note=note,
        lines=lines,
    )


class OrderService:
    """
    Domain service for Order operations.

    Usage:
        service = OrderService(db, deadline)
        order = service.create(body)
    """

    def __init__(self, db: Session, deadline: Deadline | None = None):
        self._db = db
        self._deadline = deadline
        self._repo = OrderRepository(db)

    # =========================================================================
    # Queries
    # =========================================================================

    def get(self, order_id: int) -> OrderOutput:
        return OrderOutput.from_model(self._load(order_id))

    def list_orders(self, filters: OrderFilters) -> list[OrderOutput]:
        with store_step(self._db, "list orders", self._deadline):
            orders = self._repo.find_all(filters)
        return [OrderOutput.from_model(o) for o in orders]

    def _load(self, order_id: int, *, for_update: bool = False) -> Order:
        with store_step(self._db, "load order", self._deadline, write=for_update):
            order = self._repo.find_by_id(order_id, for_update=for_update)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    # =========================================================================
    # Commands
    # =========================================================================

    def create(self, body: OrderCreate) -> OrderOutput:
        """
        Price the cart and store the order as PENDING.

        Raises:
            InvalidBranchError / InvalidTableError: Unknown branch or table,
                or the table is not part of the branch.
            InvalidMenuReferenceError / InvalidAddOnReferenceError,
            InvalidQuantityError, CatalogUnavailableError: from pricing.
        """
        self._validate_location(body.branch_id, body.table_id)

        pricer = OrderPricer(CatalogLookup(self._db, self._deadline))
        priced = pricer.price_cart(cart_from_request(body))

        order = build_order(body.branch_id, body.table_id, priced, body.note)
        with store_step(self._db, "insert order", self._deadline, write=True):
            self._db.add(order)
            self._db.flush()
            order_id = order.id
            safe_commit(self._db)

        logger.info(
            "Order created",
            order_id=order_id,
            branch_id=body.branch_id,
            table_id=body.table_id,
            lines=len(priced.lines),
            total_cents=priced.total_cents,
        )
        with store_step(self._db, "reload order", self._deadline, committed=True):
            return OrderOutput.from_model(self._repo.find_by_id(order_id))

    def update(self, order_id: int, body: OrderUpdate) -> OrderOutput:
        """
        Generic update: status (via the state machine), note, is_paid.

        COMPLETED is only reachable through sale settlement.
        """
        changes: dict[str, Any] = body.model_dump(exclude_unset=True)
        order = self._load(order_id, for_update=True)

        try:
            target = changes.get("status")
            if target is not None and target != order.status:
                event = event_for_target(order.status, target)
                order.status = next_status(order.status, event)
            elif target is not None and order.status in OrderStatus.TERMINAL:
                # Re-asserting a terminal state is still a transition attempt
                next_status(order.status, event_for_target(order.status, target))

            if "note" in changes:
                order.note = changes["note"]

            if changes.get("is_paid") is not None:
                if changes["is_paid"] and order.status != OrderStatus.COMPLETED:
                    logger.warning(
                        "Order marked paid outside settlement",
                        order_id=order_id,
                        status=order.status,
                    )
                order.is_paid = changes["is_paid"]

            with store_step(self._db, "update order", self._deadline, write=True):
                safe_commit(self._db)
        except Exception:
            self._db.rollback()
            raise

        logger.info("Order updated", order_id=order_id, fields=sorted(changes))
        with store_step(self._db, "reload order", self._deadline, committed=True):
            return OrderOutput.from_model(self._repo.find_by_id(order_id))

    def delete(self, order_id: int) -> None:
        """Hard delete a PENDING or CANCELLED order."""
        order = self._load(order_id, for_update=True)
        if order.status not in OrderStatus.DELETABLE:
            self._db.rollback()
            raise ConflictError(
                f"Order in status {order.status} cannot be deleted",
                order_id=order_id,
                status=order.status,
            )
        with store_step(self._db, "delete order", self._deadline, write=True):
            self._repo.delete(order)
            safe_commit(self._db)
        logger.info("Order deleted", order_id=order_id)

    # =========================================================================
    # Validation
    # =========================================================================

    def _validate_location(self, branch_id: int, table_id: int) -> None:
        with store_step(self._db, "validate branch", self._deadline):
            branch = self._db.get(Branch, branch_id)
        if branch is None:
            raise InvalidBranchError(branch_id)

        with store_step(self._db, "validate table", self._deadline):
            table = self._db.get(Table, table_id)
        if table is None:
            raise InvalidTableError(table_id)
        if table.branch_id != branch_id:
            raise InvalidTableError(table_id, reason=f"not in branch {branch_id}")
