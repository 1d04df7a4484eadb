"""
Database access for VoidShop

A single SQLAlchemy engine is created from ``DATABASE_URL``. Request handlers
get a session through ``get_db``; multi-statement writes go through
``transaction`` so a failure rolls back before the error reaches the caller.
"""
import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from settings import get_settings

log = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def make_engine(url: str) -> Engine:
    kwargs = {"pool_pre_ping": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    engine = create_engine(url, **kwargs)

    if engine.dialect.name == "sqlite":
        # cascades on users/products only hold with foreign keys switched on
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


engine = make_engine(get_settings().database_url)
SessionLocal = sessionmaker(bind=engine, autoflush=False)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """Commit everything done inside the block, or roll all of it back."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def init_db() -> None:
    import models  # noqa: F401  (registers the tables on Base.metadata)

    existing = set(inspect(engine).get_table_names())
    Base.metadata.create_all(bind=engine)
    created = [t for t in Base.metadata.sorted_tables if t.name not in existing]
    for table in created:
        log.info("Created table %s", table.name)
    if not created:
        log.info("Schema up to date (%d tables)", len(existing))


def ping() -> bool:
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return True


def list_tables() -> list:
    return sorted(inspect(engine).get_table_names())
