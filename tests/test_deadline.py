"""
Tests for request deadlines and store step classification.
"""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from food_shared.config.settings import settings
from food_shared.infrastructure.db import store_step
from food_shared.infrastructure.deadline import Deadline, request_deadline
from food_shared.utils.exceptions import NotFoundError, StoreTimeoutError, UpstreamError


class TestDeadline:
    def test_fresh_deadline_has_budget(self):
        deadline = Deadline.after(5)
        assert not deadline.expired()
        assert 0 < deadline.remaining() <= 5

    def test_zero_budget_is_expired(self):
        deadline = Deadline.after(0)
        assert deadline.expired()
        assert deadline.remaining() == 0.0
        with pytest.raises(StoreTimeoutError) as exc_info:
            deadline.check("load orders")
        assert exc_info.value.step == "load orders"

    def test_header_is_capped(self):
        deadline = request_deadline(x_request_timeout=10_000)
        assert deadline.budget == settings.store_timeout_max_seconds

    @pytest.mark.parametrize("value", [None, 0, -3])
    def test_missing_or_non_positive_header_uses_default(self, value):
        assert request_deadline(x_request_timeout=value).budget == settings.store_timeout_seconds


class TestStoreStep:
    def test_expired_deadline_refuses_to_start(self, db_session):
        ran = []
        with pytest.raises(StoreTimeoutError):
            with store_step(db_session, "insert sale", Deadline.after(0), write=True):
                ran.append(True)
        assert ran == []

    def test_driver_failure_on_read_is_retriable(self, db_session):
        with pytest.raises(UpstreamError) as exc_info:
            with store_step(db_session, "load menu", Deadline.after(5)):
                raise OperationalError("SELECT", {}, Exception("server closed the connection"))
        assert exc_info.value.retriable is True
        assert exc_info.value.step == "load menu"

    def test_driver_failure_on_write_is_not_retriable(self, db_session):
        with pytest.raises(UpstreamError) as exc_info:
            with store_step(db_session, "insert order", None, write=True):
                raise IntegrityError("INSERT", {}, Exception("constraint failed"))
        assert exc_info.value.retriable is False
        assert exc_info.value.partial is False

    def test_failure_after_commit_is_partial(self, db_session):
        with pytest.raises(UpstreamError) as exc_info:
            with store_step(db_session, "reload order", Deadline.after(5), committed=True):
                raise OperationalError("SELECT", {}, Exception("server closed the connection"))
        assert exc_info.value.partial is True
        assert exc_info.value.retriable is False
        assert exc_info.value.step == "reload order"

    def test_reload_after_commit_ignores_spent_deadline(self, db_session):
        ran = []
        with store_step(db_session, "reload order", Deadline.after(0), committed=True):
            ran.append(True)
        assert ran == [True]

    def test_application_errors_pass_through(self, db_session):
        with pytest.raises(NotFoundError):
            with store_step(db_session, "load order"):
                raise NotFoundError("Order", 1)
