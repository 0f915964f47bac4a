from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from fastapi import Request

# Base class for all models
Base = declarative_base()


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Build the engine for the message store.

    For a file-backed SQLite URL the parent directory is created first.
    check_same_thread=False is needed because FastAPI runs sync handlers
    in a threadpool.
    """
    url = make_url(database_url)
    is_sqlite = url.get_backend_name() == "sqlite"

    if is_sqlite and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(
        url,
        connect_args={"check_same_thread": False} if is_sqlite else {},
        echo=echo
    )

    if is_sqlite:
        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_conn, connection_record):
            # SQLite ignores REFERENCES clauses unless asked
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request):
    """
    Dependency that provides a database session to route handlers.
    The factory is built once by create_app and lives on app.state.
    Ensures session is properly closed after request.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def init_db(engine: Engine):
    """
    Initialize database schema.
    Creates the users and messages tables if they don't exist.
    Call this on application startup.
    """
    # Registers the models on Base.metadata
    from msgboard import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
