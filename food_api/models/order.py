"""
Order models: Order, OrderLine, OrderLineAddOn.

Lines store the prices that were in effect when the order was placed.
An order's total is fixed at creation and never recomputed from the catalog.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import BigInteger, Boolean, CheckConstraint, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from food_shared.config.constants import OrderStatus

from .base import Base, BigIntId, TimestampMixin

if TYPE_CHECKING:
    from .branch import Branch, Table


class Order(TimestampMixin, Base):
    """
    An order placed at a table.
    Status workflow: PENDING -> IN_PROGRESS -> COMPLETED, CANCELLED from
    either open state.
    """

    __tablename__ = "customer_order"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    branch_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("branch.id"), nullable=False, index=True
    )
    table_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("dining_table.id"), nullable=False, index=True
    )
    total_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    status: Mapped[str] = mapped_column(
        Text, default=OrderStatus.PENDING, nullable=False, index=True
    )
    is_paid: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    note: Mapped[Optional[str]] = mapped_column(Text)

    lines: Mapped[list["OrderLine"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderLine.position",
    )
    branch: Mapped["Branch"] = relationship()
    table: Mapped["Table"] = relationship()

    __table_args__ = (
        CheckConstraint("total_cents >= 0", name="chk_order_total_non_negative"),
        CheckConstraint(
            "status IN ('PENDING', 'IN_PROGRESS', 'COMPLETED', 'CANCELLED')",
            name="chk_order_status_valid",
        ),
        Index("ix_order_branch_status", "branch_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, status='{self.status}', total_cents={self.total_cents})>"


class OrderLine(Base):
    """One menu item of an order with its price snapshot."""

    __tablename__ = "order_line"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    order_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("customer_order.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    menu_id: Mapped[Optional[int]] = mapped_column(
        BigIntId, ForeignKey("menu.id", ondelete="SET NULL"), index=True
    )
    menu_title: Mapped[str] = mapped_column(Text, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    unit_discount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    add_on_subtotal_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    subtotal_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    note: Mapped[Optional[str]] = mapped_column(Text)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="chk_order_line_qty_positive"),
        CheckConstraint("unit_price_cents >= 0", name="chk_order_line_price_non_negative"),
    )

    order: Mapped["Order"] = relationship(back_populates="lines")
    add_ons: Mapped[list["OrderLineAddOn"]] = relationship(
        back_populates="line",
        cascade="all, delete-orphan",
        order_by="OrderLineAddOn.id",
    )


class OrderLineAddOn(Base):
    """An add-on ordered with a line, with its price snapshot."""

    __tablename__ = "order_line_add_on"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    order_line_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("order_line.id", ondelete="CASCADE"), nullable=False, index=True
    )
    add_on_id: Mapped[Optional[int]] = mapped_column(
        BigIntId, ForeignKey("add_on.id", ondelete="SET NULL"), index=True
    )
    add_on_title: Mapped[str] = mapped_column(Text, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    subtotal_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    note: Mapped[Optional[str]] = mapped_column(Text)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="chk_order_line_add_on_qty_positive"),
    )

    line: Mapped["OrderLine"] = relationship(back_populates="add_ons")
