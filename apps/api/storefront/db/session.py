from __future__ import annotations

from collections.abc import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.config import is_sqlite_url, settings


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    # Order detail rows rely on ON DELETE CASCADE
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str) -> Engine:
    if not is_sqlite_url(database_url):
        return create_engine(database_url, pool_pre_ping=True)

    options: dict = {"connect_args": {"check_same_thread": False}}
    if ":memory:" in database_url:
        # One shared connection, otherwise every session sees its own empty database
        options["poolclass"] = StaticPool
    sqlite_engine = create_engine(database_url, **options)
    event.listen(sqlite_engine, "connect", _enable_sqlite_foreign_keys)
    return sqlite_engine


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
