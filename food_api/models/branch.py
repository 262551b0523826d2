"""
Branch and Table models.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, BigIntId, TimestampMixin

if TYPE_CHECKING:
    from .catalog import Category, MenuItem


class Branch(TimestampMixin, Base):
    """A restaurant location. Every other entity hangs off a branch."""

    __tablename__ = "branch"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    address: Mapped[Optional[str]] = mapped_column(Text)
    contact: Mapped[Optional[str]] = mapped_column(Text)

    tables: Mapped[list["Table"]] = relationship(back_populates="branch")
    categories: Mapped[list["Category"]] = relationship(back_populates="branch")
    menus: Mapped[list["MenuItem"]] = relationship(back_populates="branch")


class Table(TimestampMixin, Base):
    """A dining table inside a branch."""

    __tablename__ = "dining_table"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    branch_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("branch.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, default=4, nullable=False)

    __table_args__ = (
        CheckConstraint("capacity > 0", name="chk_table_capacity_positive"),
    )

    branch: Mapped["Branch"] = relationship(back_populates="tables")

    def __repr__(self) -> str:
        return f"<Table(id={self.id}, name='{self.name}', branch_id={self.branch_id})>"
