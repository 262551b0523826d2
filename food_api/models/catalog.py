"""
Catalog models: Category, MenuItem, AddOn.

Prices are integer cents. A menu item's discount is a flat amount taken off
its unit price and can never exceed it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import BigInteger, Boolean, CheckConstraint, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, BigIntId, TimestampMixin

if TYPE_CHECKING:
    from .branch import Branch


class Category(TimestampMixin, Base):
    """Menu category within a branch."""

    __tablename__ = "category"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    branch_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("branch.id"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)

    branch: Mapped["Branch"] = relationship(back_populates="categories")
    menus: Mapped[list["MenuItem"]] = relationship(back_populates="category")


class MenuItem(TimestampMixin, Base):
    """A sellable dish or drink."""

    __tablename__ = "menu"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    branch_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("branch.id"), nullable=False, index=True
    )
    category_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("category.id"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    short_title: Mapped[Optional[str]] = mapped_column(Text)
    description: Mapped[Optional[str]] = mapped_column(Text)
    price_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    discount_cents: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    cover_url: Mapped[Optional[str]] = mapped_column(Text)

    __table_args__ = (
        CheckConstraint("price_cents >= 0", name="chk_menu_price_non_negative"),
        CheckConstraint("discount_cents >= 0", name="chk_menu_discount_non_negative"),
        CheckConstraint("discount_cents <= price_cents", name="chk_menu_discount_le_price"),
    )

    branch: Mapped["Branch"] = relationship(back_populates="menus")
    category: Mapped["Category"] = relationship(back_populates="menus")
    add_ons: Mapped[list["AddOn"]] = relationship(
        back_populates="menu",
        cascade="all, delete-orphan",
        order_by="AddOn.id",
    )

    def __repr__(self) -> str:
        return f"<MenuItem(id={self.id}, title='{self.title}', price_cents={self.price_cents})>"


class AddOn(TimestampMixin, Base):
    """
    An extra that can be ordered with a menu item.
    When ``menu_id`` is set the add-on may only be ordered with that item.
    """

    __tablename__ = "add_on"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    menu_id: Mapped[Optional[int]] = mapped_column(
        BigIntId, ForeignKey("menu.id"), index=True
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    price_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    cover_url: Mapped[Optional[str]] = mapped_column(Text)

    __table_args__ = (
        CheckConstraint("price_cents >= 0", name="chk_add_on_price_non_negative"),
    )

    menu: Mapped[Optional["MenuItem"]] = relationship(back_populates="add_ons")
