# leave_manager/database.py
import logging
from functools import wraps

from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, declarative_base

from leave_manager.config import DATABASE_URL
from leave_manager.results import Err, ErrorKind

log = logging.getLogger(__name__)


def make_engine(url: str = DATABASE_URL, **kwargs):
    """
    Create an engine for the given URL.
    SQLite file databases are switched to WAL so readers don't block the writer.
    """
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    engine = create_engine(url, **kwargs)

    if url.startswith("sqlite") and ":memory:" not in url:
        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.close()

    return engine


engine = make_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def storage_errors_as_results(func):
    """
    Wrap a service function taking `db` first: a SQLAlchemyError rolls the
    session back, is logged, and comes back as Err(INTERNAL).
    """
    @wraps(func)
    def wrapper(db, *args, **kwargs):
        try:
            return func(db, *args, **kwargs)
        except SQLAlchemyError:
            db.rollback()
            log.exception("Storage failure in %s", func.__name__)
            return Err(ErrorKind.INTERNAL, "Internal error")
    return wrapper
