"""
Database configuration and session management.
Uses SQLAlchemy 2.0 patterns.

Sessions are created per request and injected through ``get_db``; nothing
outside this module holds a session or connection.
"""

import os
from collections.abc import Generator, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError, SQLAlchemyError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import sessionmaker, Session

from food_shared.config.logging import get_logger
from food_shared.config.settings import DATABASE_URL
from food_shared.infrastructure.deadline import Deadline
from food_shared.utils.exceptions import AppException, StoreTimeoutError, UpstreamError

logger = get_logger(__name__)


def _calculate_pool_size() -> int:
    """(2 * CPU cores) + 1, capped at 20."""
    cores = os.cpu_count() or 4
    return min(cores * 2 + 1, 20)


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_size": _calculate_pool_size(),
        "max_overflow": 15,
        "pool_timeout": 30,
        "pool_recycle": 1800,
        "connect_args": {"connect_timeout": 10},
    }


engine = create_engine(DATABASE_URL, echo=False, **_engine_kwargs(DATABASE_URL))

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
)


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency for database sessions.

    Usage:
        @app.get("/items")
        def get_items(db: Session = Depends(get_db)):
            ...

    The session is automatically closed after the request completes.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """
    Context manager for database sessions outside of FastAPI.

    Usage:
        with get_db_context() as db:
            db.scalar(select(Branch))
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def safe_commit(db: Session) -> None:
    """
    Commit with automatic rollback on failure.

    Raises the original exception after rolling back.
    """
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise


def _apply_statement_timeout(db: Session, deadline: Deadline) -> None:
    """Bound the next statements of the current transaction by the remaining budget."""
    bind = db.get_bind()
    if bind.dialect.name != "postgresql":
        return
    remaining_ms = max(1, int(deadline.remaining() * 1000))
    db.execute(
        text("SELECT set_config('statement_timeout', :ms, true)"),
        {"ms": str(remaining_ms)},
    )


def _is_statement_timeout(exc: OperationalError) -> bool:
    # psycopg raises QueryCanceled (SQLSTATE 57014) when statement_timeout fires
    sqlstate = getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)
    return sqlstate == "57014"


@contextmanager
def store_step(
    db: Session,
    step: str,
    deadline: Deadline | None = None,
    *,
    write: bool = False,
    committed: bool = False,
) -> Iterator[None]:
    """
    Run one store step under the request deadline.

    - Refuses to start when the deadline has already passed.
    - Bounds PostgreSQL statements by the remaining budget.
    - Classifies driver failures: timeouts become StoreTimeoutError,
      everything else UpstreamError (retriable only for reads).

    The session is rolled back on driver failures, so a failing step inside
    a multi-step write leaves nothing committed.

    ``committed=True`` marks a step that runs after the request's write has
    committed (reloading the stored entity for the response). It ignores the
    deadline, and its failures report ``partial=True`` and are never
    retriable, since a retry would repeat the write.

    Usage:
        with store_step(db, "load orders", deadline):
            orders = repo.find_all(filters)
    """
    retriable = not (write or committed)

    if deadline is not None and not committed:
        deadline.check(step)
        try:
            _apply_statement_timeout(db, deadline)
        except SQLAlchemyError as exc:
            db.rollback()
            raise UpstreamError("store", step=step, retriable=retriable, error=str(exc)) from exc

    try:
        yield
    except AppException:
        raise
    except PoolTimeoutError as exc:
        db.rollback()
        raise StoreTimeoutError(step, partial=committed, retriable=not committed, error=str(exc)) from exc
    except OperationalError as exc:
        db.rollback()
        if _is_statement_timeout(exc):
            raise StoreTimeoutError(step, partial=committed, retriable=not committed, error=str(exc)) from exc
        raise UpstreamError(
            "store", step=step, partial=committed, retriable=retriable, error=str(exc)
        ) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise UpstreamError(
            "store", step=step, partial=committed, retriable=retriable, error=str(exc)
        ) from exc


def ping(db: Session) -> None:
    """Round-trip to the store; raises on failure."""
    db.execute(text("SELECT 1"))
