from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from .config import DATABASE_URL, DB_ECHO

engine = create_engine(
    DATABASE_URL,
    echo=DB_ECHO,            # CLINIC_DB_ECHO=1 to see the queries
    future=True,
)

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    future=True,
    expire_on_commit=False
)


def _casefold(value):
    return value.casefold() if isinstance(value, str) else value


def _sqlite_connect(dbapi_connection, connection_record) -> None:
    # SQLite enforces FOREIGN KEY only when asked, per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    # built-in lower() and LIKE only fold ASCII
    dbapi_connection.create_function("casefold", 1, _casefold, deterministic=True)


IS_SQLITE = engine.dialect.name == "sqlite"

if IS_SQLITE:
    event.listen(engine, "connect", _sqlite_connect)


class Base(DeclarativeBase):
    """Base ORM for all models."""
    pass


@contextmanager
def db_session() -> Iterator[Session]:
    """
    Unit of work around a single session:
    - commit if everything went fine
    - rollback on exceptions (then re-raise)
    - always close
    """
    session: Session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db() -> None:
    """Create tables if they do not exist."""
    from . import models  # noqa: F401  registers the tables

    Base.metadata.create_all(bind=engine)


def reset_db() -> None:
    """Drop and recreate every table."""
    from . import models  # noqa: F401

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
