from __future__ import annotations

from contextlib import contextmanager
from collections.abc import Generator

from flask import Flask, g
from sqlalchemy import create_engine, event
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

# Postgres SQLSTATE codes surfaced by the record store on conflicts.
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"


class RecordConflict(Exception):
    """A write was refused by a uniqueness or foreign-key constraint."""

    def __init__(self, message: str, kind: str | None = None):
        super().__init__(message)
        self.message = message
        self.kind = kind


def init_db(app: Flask) -> None:
    db_url = app.config["DATABASE_URL"]
    is_postgres = db_url.startswith("postgres")
    engine_kwargs: dict[str, object] = {
        "future": True,
        "pool_pre_ping": True,
    }
    if is_postgres:
        engine_kwargs.update(
            {
                "pool_recycle": 1800,
                "pool_size": 5,
                "max_overflow": 10,
                "pool_timeout": 30,
            }
        )
    engine = create_engine(db_url, **engine_kwargs)
    if db_url.startswith("sqlite"):
        enable_sqlite_foreign_keys(engine)
    app.extensions["sqlalchemy_engine"] = engine
    app.extensions["sqlalchemy_sessionmaker"] = sessionmaker(
        bind=engine,
        class_=Session,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        future=True,
    )


def enable_sqlite_foreign_keys(engine) -> None:
    """SQLite ignores ON DELETE RESTRICT/CASCADE/SET NULL unless asked per connection."""

    @event.listens_for(engine, "connect")
    def _fk_pragma(dbapi_connection, connection_record):  # type: ignore[no-redef]
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def db_session(app: Flask | None = None) -> Session:
    """
    Request-scoped session. Use inside request handlers.
    """
    if hasattr(g, "db_session") and g.db_session is not None:
        return g.db_session
    if app is None:
        from flask import current_app

        app = current_app
    sm = app.extensions["sqlalchemy_sessionmaker"]
    g.db_session = sm()  # type: ignore[assignment]
    return g.db_session


def teardown_db_session(_exc: BaseException | None) -> None:
    s: Session | None = getattr(g, "db_session", None)
    if s is not None:
        s.close()
        g.db_session = None


@contextmanager
def session_scope(app: Flask) -> Generator[Session, None, None]:
    """
    Non-request helper for scripts and tests: yields a session and commits/rolls back.
    """
    sm = app.extensions["sqlalchemy_sessionmaker"]
    s: Session = sm()
    try:
        yield s
        s.commit()
    except Exception:
        s.rollback()
        raise
    finally:
        s.close()


def integrity_kind(exc: IntegrityError) -> str | None:
    """Classify an IntegrityError as "unique" or "foreign_key" (None if neither)."""
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code == UNIQUE_VIOLATION:
        return "unique"
    if code == FOREIGN_KEY_VIOLATION:
        return "foreign_key"
    text = str(orig or exc).lower()
    if "unique constraint" in text or "duplicate key" in text:
        return "unique"
    if "foreign key constraint" in text:
        return "foreign_key"
    return None


def flush_or_conflict(s: Session, messages: dict[str, str], default: str = "The record could not be saved.") -> None:
    """
    Flush pending writes; translate constraint violations into RecordConflict.

    `messages` maps a conflict kind ("unique", "foreign_key") to the message
    shown to the user. The session is rolled back before raising.
    """
    try:
        s.flush()
    except IntegrityError as e:
        s.rollback()
        kind = integrity_kind(e)
        raise RecordConflict(messages.get(kind or "", default), kind=kind) from e
