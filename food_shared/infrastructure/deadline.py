"""
Per-request time budget for store work.

A Deadline is created once per request and handed to every service call.
Services check it before each store step so a slow request stops issuing
new work once its budget is spent.
"""

from __future__ import annotations

import time
from dataclasses import dataclass

from fastapi import Header

from food_shared.config.settings import settings
from food_shared.utils.exceptions import StoreTimeoutError


@dataclass(frozen=True)
class Deadline:
    """Monotonic-clock deadline."""

    expires_at: float
    budget: float

    @classmethod
    def after(cls, seconds: float) -> Deadline:
        return cls(expires_at=time.monotonic() + seconds, budget=seconds)

    @classmethod
    def default(cls) -> Deadline:
        return cls.after(settings.store_timeout_seconds)

    def remaining(self) -> float:
        """Seconds left, never negative."""
        return max(0.0, self.expires_at - time.monotonic())

    def expired(self) -> bool:
        return self.remaining() <= 0.0

    def check(self, step: str) -> None:
        """Raise StoreTimeoutError if the budget is spent."""
        if self.expired():
            raise StoreTimeoutError(step, budget_seconds=self.budget)


def request_deadline(
    x_request_timeout: float | None = Header(default=None, alias="X-Request-Timeout"),
) -> Deadline:
    """
    FastAPI dependency building the request deadline.

    Callers may shorten the budget with ``X-Request-Timeout: <seconds>``;
    values above ``store_timeout_max_seconds`` are capped.
    """
    if x_request_timeout is None or x_request_timeout <= 0:
        return Deadline.default()
    return Deadline.after(min(x_request_timeout, settings.store_timeout_max_seconds))
