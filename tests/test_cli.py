"""
Tests for the operational CLI helpers.
"""

import pytest
from sqlalchemy import func, select
from typer.testing import CliRunner

from food_api.cli import app, create_root_user, seed_demo
from food_api.models import AddOn, Branch, MenuItem, Table
from food_shared.security.password import verify_password
from food_shared.utils.exceptions import ConflictError


def count(db, model) -> int:
    return db.scalar(select(func.count()).select_from(model))


def test_create_root_user(db_session):
    user = create_root_user(db_session, "Root", "Root@Test.com", "topsecret")
    assert user.role == "ROOT"
    assert user.is_verified is True
    assert user.email == "root@test.com"
    assert verify_password("topsecret", user.password)


def test_create_root_user_twice(db_session):
    create_root_user(db_session, "Root", "root@test.com", "topsecret")
    with pytest.raises(ConflictError):
        create_root_user(db_session, "Root", "root@test.com", "topsecret")


def test_seed_demo_once(db_session):
    branch = seed_demo(db_session)

    assert branch is not None
    assert count(db_session, Table) == 6
    assert count(db_session, MenuItem) == 5
    assert count(db_session, AddOn) == 5
    assert seed_demo(db_session) is None
    assert count(db_session, Branch) == 1


def test_version_command():
    result = CliRunner().invoke(app, ["version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output
