"""
Sale models: Sale, SaleOrder.

A sale settles a set of orders. ``grand_total_cents`` always equals
``total_cents - discount_cents + tax_cents``; the database enforces it.
A grand total below zero is allowed (discount larger than the bill).
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, BigIntId

if TYPE_CHECKING:
    from .branch import Branch, Table
    from .order import Order


class Sale(Base):
    """Settlement record. Created once, never updated, may be deleted."""

    __tablename__ = "sale"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    branch_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("branch.id"), nullable=False, index=True
    )
    table_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("dining_table.id"), nullable=False, index=True
    )
    total_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    discount_cents: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    tax_cents: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    grand_total_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    payment_method: Mapped[Optional[str]] = mapped_column(Text)
    note: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )

    __table_args__ = (
        CheckConstraint("discount_cents >= 0", name="chk_sale_discount_non_negative"),
        CheckConstraint("tax_cents >= 0", name="chk_sale_tax_non_negative"),
        CheckConstraint(
            "grand_total_cents = total_cents - discount_cents + tax_cents",
            name="chk_sale_grand_total",
        ),
    )

    order_links: Mapped[list["SaleOrder"]] = relationship(
        back_populates="sale",
        cascade="all, delete-orphan",
        order_by="SaleOrder.position",
    )
    branch: Mapped["Branch"] = relationship()
    table: Mapped["Table"] = relationship()

    @property
    def order_ids(self) -> list[int]:
        return [link.order_id for link in self.order_links]

    def __repr__(self) -> str:
        return f"<Sale(id={self.id}, grand_total_cents={self.grand_total_cents})>"


class SaleOrder(Base):
    """Link between a sale and an order it settled. An order is settled at most once."""

    __tablename__ = "sale_order"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    sale_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("sale.id", ondelete="CASCADE"), nullable=False, index=True
    )
    order_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("customer_order.id"), nullable=False, unique=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    order_total_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)

    sale: Mapped["Sale"] = relationship(back_populates="order_links")
    order: Mapped["Order"] = relationship()
