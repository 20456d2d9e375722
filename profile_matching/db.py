"""PostgreSQL engine and sessions shared by the profile store and cost tracking.

One engine per process, created lazily. NullPool keeps no idle connections:
each session borrows a connection for the duration of its work, which suits
short Dagster runs and one-shot CLI calls alike.
"""

import os
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import NullPool

_lock = threading.Lock()
_engine: Engine | None = None
_session_factory: sessionmaker | None = None


def build_url() -> str:
    """DATABASE_URL if set, otherwise a URL assembled from the POSTGRES_* variables."""
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    host = os.getenv("POSTGRES_HOST", "localhost")
    port = os.getenv("POSTGRES_PORT", "5432")
    user = os.getenv("POSTGRES_USER", "matching")
    password = os.getenv("POSTGRES_PASSWORD", "matching_dev")
    database = os.getenv("POSTGRES_DB", "profile_matching")
    return f"postgresql://{user}:{password}@{host}:{port}/{database}"


def get_engine() -> Engine:
    global _engine, _session_factory
    if _engine is None:
        with _lock:
            if _engine is None:
                _engine = create_engine(
                    build_url(),
                    poolclass=NullPool,
                    echo=os.getenv("SQL_ECHO", "").lower() == "true",
                )
                _session_factory = sessionmaker(bind=_engine, expire_on_commit=False)
    return _engine


def get_session() -> Session:
    get_engine()
    return _session_factory()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session that commits on success, rolls back on error and is always closed."""
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
