"""
User model.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from food_shared.config.constants import Roles

from .base import Base, BigIntId, TimestampMixin

if TYPE_CHECKING:
    from .branch import Branch


class User(TimestampMixin, Base):
    """Staff account. Self-registered accounts start unverified with role STAFF."""

    __tablename__ = "app_user"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    branch_id: Mapped[Optional[int]] = mapped_column(
        BigIntId, ForeignKey("branch.id"), index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[str] = mapped_column(Text, default=Roles.STAFF, nullable=False)
    address: Mapped[Optional[str]] = mapped_column(Text)
    nrc: Mapped[Optional[str]] = mapped_column(Text)
    gender: Mapped[Optional[str]] = mapped_column(Text)
    avatar_url: Mapped[Optional[str]] = mapped_column(Text)
    verification_code: Mapped[Optional[str]] = mapped_column(String(16))
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    branch: Mapped[Optional["Branch"]] = relationship()

    def __repr__(self) -> str:
        return f"<User(id={self.id}, role='{self.role}')>"
