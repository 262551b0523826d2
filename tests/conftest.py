"""
Pytest configuration and fixtures for backend tests.
"""

import os

# Must be set before any application module reads settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("NOTIFIER_BACKEND", "log")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from food_api.main import app
from food_api.models import AddOn, Base, Branch, Category, MenuItem, Table, User
from food_shared.config.constants import Roles
from food_shared.infrastructure.blob_store import InMemoryBlobStore, get_blob_store
from food_shared.infrastructure.db import get_db
from food_shared.infrastructure.notifier import LogNotifier, get_notifier
from food_shared.security.password import hash_password


# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DEFAULT_PASSWORD = "testpass123"


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def blob_store():
    return InMemoryBlobStore()


@pytest.fixture
def notifier():
    return LogNotifier()


@pytest.fixture(scope="function")
def client(db_session, blob_store, notifier):
    """
    Create a test client with database, blob store and notifier overrides.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    app.dependency_overrides[get_notifier] = lambda: notifier

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# Catalog fixtures
# =============================================================================


@pytest.fixture
def seed_branch(db_session):
    branch = Branch(name="Main Branch", address="1 Market St", contact="+1 555 0100")
    db_session.add(branch)
    db_session.commit()
    db_session.refresh(branch)
    return branch


@pytest.fixture
def other_branch(db_session):
    branch = Branch(name="Second Branch", address="2 Harbour Rd")
    db_session.add(branch)
    db_session.commit()
    db_session.refresh(branch)
    return branch


@pytest.fixture
def seed_table(db_session, seed_branch):
    table = Table(branch_id=seed_branch.id, name="T-01", capacity=4)
    db_session.add(table)
    db_session.commit()
    db_session.refresh(table)
    return table


@pytest.fixture
def seed_category(db_session, seed_branch):
    category = Category(branch_id=seed_branch.id, title="Mains", description="Main dishes")
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


@pytest.fixture
def seed_menu(db_session, seed_branch, seed_category):
    """M1: price 10.00, discount 1.00."""
    menu = MenuItem(
        branch_id=seed_branch.id,
        category_id=seed_category.id,
        title="Chicken Curry",
        short_title="Curry",
        price_cents=1000,
        discount_cents=100,
        is_available=True,
    )
    db_session.add(menu)
    db_session.commit()
    db_session.refresh(menu)
    return menu


@pytest.fixture
def seed_add_on(db_session, seed_menu):
    """A1: price 2.00, tied to M1."""
    add_on = AddOn(menu_id=seed_menu.id, title="Extra Rice", price_cents=200, is_available=True)
    db_session.add(add_on)
    db_session.commit()
    db_session.refresh(add_on)
    return add_on


@pytest.fixture
def other_menu(db_session, seed_branch, seed_category):
    menu = MenuItem(
        branch_id=seed_branch.id,
        category_id=seed_category.id,
        title="Fried Noodles",
        price_cents=850,
        discount_cents=0,
        is_available=True,
    )
    db_session.add(menu)
    db_session.commit()
    db_session.refresh(menu)
    return menu


# =============================================================================
# User fixtures
# =============================================================================


@pytest.fixture
def make_user(db_session, seed_branch):
    """Factory creating a verified user with the given role."""

    def _make(role: str = Roles.STAFF, email: str | None = None, password: str = DEFAULT_PASSWORD):
        user = User(
            branch_id=seed_branch.id,
            name=f"Test {role.title()}",
            email=email or f"{role.lower()}@test.com",
            password=hash_password(password),
            role=role,
            is_verified=True,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture
def headers_for(client, make_user):
    """Factory returning auth headers for a freshly created user of a role."""

    def _headers(role: str = Roles.STAFF):
        user = make_user(role)
        response = client.post(
            "/api/auth/login",
            json={"email": user.email, "password": DEFAULT_PASSWORD},
        )
        assert response.status_code == 200, f"Login failed: {response.json()}"
        token = response.json()["access_token"]
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def staff_headers(headers_for):
    return headers_for(Roles.STAFF)


@pytest.fixture
def assistant_headers(headers_for):
    return headers_for(Roles.ASSISTANT)


@pytest.fixture
def manager_headers(headers_for):
    return headers_for(Roles.MANAGER)


@pytest.fixture
def owner_headers(headers_for):
    return headers_for(Roles.OWNER)


@pytest.fixture
def root_headers(headers_for):
    return headers_for(Roles.ROOT)


# =============================================================================
# Order fixtures
# =============================================================================


@pytest.fixture
def make_order(db_session, seed_branch, seed_table):
    """Factory creating a stored order with a fixed total and status."""
    from food_api.models import Order

    def _make(total_cents: int = 1000, status: str = "IN_PROGRESS", branch_id=None, table_id=None):
        order = Order(
            branch_id=branch_id or seed_branch.id,
            table_id=table_id or seed_table.id,
            total_cents=total_cents,
            status=status,
            is_paid=False,
        )
        db_session.add(order)
        db_session.commit()
        db_session.refresh(order)
        return order

    return _make
