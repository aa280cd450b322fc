from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker


def get_connect_args(database_url: str) -> Dict[str, Any]:
    """Get database-specific connection arguments"""
    if database_url.startswith("sqlite"):
        # The web shell touches the store from worker threads
        return {"check_same_thread": False}
    return {}


def create_store_engine(database_url: str) -> Engine:
    """Create the engine backing the key-value store.

    For file-based SQLite URLs the parent directory is created first.
    """
    if database_url.startswith("sqlite:///") and ":memory:" not in database_url:
        Path(database_url[len("sqlite:///"):]).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(database_url, connect_args=get_connect_args(database_url))


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def session_scope(factory: sessionmaker) -> Generator[Session, None, None]:
    """Yield a session and always close it"""
    db = factory()
    try:
        yield db
    finally:
        db.close()
