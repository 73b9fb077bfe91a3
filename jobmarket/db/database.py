"""
Database access - engine, sessions and store-error translation.

One Database instance is created per process by the app factory and shared by
every request. All outbound calls are bounded by ``timeout_seconds``.
"""

import functools
from datetime import datetime, timezone
from contextlib import contextmanager
from typing import Any, Callable, Iterator

from sqlalchemy import create_engine, event, text
from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from jobmarket.core.errors import ConflictError, StoreUnavailableError
from jobmarket.core.logging import get_logger
from jobmarket.db.schema import metadata

logger = get_logger(__name__)


def _engine_options(url: str, timeout_seconds: float, echo: bool) -> dict:
    if url.startswith("sqlite"):
        options = {
            "echo": echo,
            "connect_args": {"check_same_thread": False, "timeout": timeout_seconds},
        }
        if ":memory:" in url or url in ("sqlite://", "sqlite+pysqlite://"):
            options["poolclass"] = StaticPool
        return options

    # pool_size=5: maintain 5 connections ready
    # max_overflow=10: allow 10 extra connections under load
    return {
        "echo": echo,
        "pool_size": 5,
        "max_overflow": 10,
        "pool_timeout": timeout_seconds,
        "pool_pre_ping": True,
        "connect_args": {
            "connect_timeout": max(1, int(timeout_seconds)),
            "options": f"-c statement_timeout={int(timeout_seconds * 1000)}",
        },
    }


def _enable_sqlite_foreign_keys(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class Database:
    """Owns the engine and hands out transactional sessions."""

    def __init__(self, url: str, timeout_seconds: float = 5.0, echo: bool = False):
        self.url = url
        self.engine = create_engine(url, **_engine_options(url, timeout_seconds, echo))
        if url.startswith("sqlite"):
            _enable_sqlite_foreign_keys(self.engine)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """
        Transactional session that commits on success.

        Store failures leave as application errors:
        - IntegrityError -> ConflictError
        - timeouts / connectivity (OperationalError, pool TimeoutError) -> StoreUnavailableError
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except sa_exc.IntegrityError as exc:
            session.rollback()
            logger.info("Constraint violation: %s", exc.orig)
            raise ConflictError("Request conflicts with existing data") from exc
        except (sa_exc.OperationalError, sa_exc.TimeoutError) as exc:
            session.rollback()
            logger.warning("Database unavailable: %s", exc)
            raise StoreUnavailableError() from exc
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_tables(self) -> None:
        metadata.create_all(self.engine)

    def test_connection(self) -> bool:
        """
        Test if the database is reachable.
        Returns True if connection successful, False otherwise.
        """
        try:
            with self.session() as db:
                row = db.execute(text("SELECT 1 AS test")).fetchone()
                return row[0] == 1
        except Exception as e:
            logger.warning("Database connection failed: %s", e)
            return False

    def dispose(self) -> None:
        self.engine.dispose()


def degrade_on_store_unavailable(default: Callable[[], Any]) -> Callable:
    """
    Decorator for non-critical reads: when the store is unavailable return
    ``default()`` instead of failing the request.
    """

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return fn(*args, **kwargs)
            except StoreUnavailableError:
                logger.warning("%s degraded to default: store unavailable", fn.__qualname__)
                return default()

        return wrapper

    return decorator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
