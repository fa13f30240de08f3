"""
Database engine and session factory.

SQLite by default; any SQLAlchemy URL in DATABASE_URL works, including
hosted Postgres URLs that still use the postgres:// scheme.
"""

import logging
import os
import time
from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

DEFAULT_DATABASE_URL = "sqlite:///./quizlearner.db"

SLOW_QUERY_THRESHOLD_MS = int(os.getenv("SLOW_QUERY_THRESHOLD_MS", "100"))
MAX_LOGGED_STATEMENT = 500
MAX_LOGGED_PARAMS = 200

query_logger = logging.getLogger("sqlalchemy.query_timing")
query_logger.setLevel(logging.DEBUG if os.getenv("DEBUG_QUERIES") else logging.WARNING)


def normalize_database_url(url: str) -> str:
    """SQLAlchemy only accepts the postgresql:// scheme."""
    if url.startswith("postgres://"):
        return "postgresql://" + url[len("postgres://"):]
    return url


def _truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


def watch_slow_queries(target: Engine, threshold_ms: Optional[int] = None) -> None:
    """Log statements on this engine slower than threshold_ms (default SLOW_QUERY_THRESHOLD_MS)."""

    @event.listens_for(target, "before_cursor_execute")
    def start_timer(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("query_start_time", []).append(time.perf_counter())

    @event.listens_for(target, "after_cursor_execute")
    def log_if_slow(conn, cursor, statement, parameters, context, executemany):
        start_times = conn.info.get("query_start_time")
        if not start_times:
            return
        elapsed_ms = (time.perf_counter() - start_times.pop()) * 1000
        limit = SLOW_QUERY_THRESHOLD_MS if threshold_ms is None else threshold_ms
        if elapsed_ms > limit:
            query_logger.warning(
                f"SLOW QUERY ({elapsed_ms:.2f}ms): {_truncate(statement, MAX_LOGGED_STATEMENT)} "
                f"| params={_truncate(str(parameters), MAX_LOGGED_PARAMS)}"
            )


def build_engine(url: str) -> Engine:
    url = normalize_database_url(url)
    if url.startswith("sqlite"):
        # Sync routes run in FastAPI's threadpool
        new_engine = create_engine(url, connect_args={"check_same_thread": False}, pool_pre_ping=True)
    else:
        new_engine = create_engine(
            url,
            pool_pre_ping=True,
            pool_recycle=1800,
            pool_size=5,
            max_overflow=10,
            pool_timeout=30,
        )
    watch_slow_queries(new_engine)
    return new_engine


DATABASE_URL = normalize_database_url(os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL))

engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Request-scoped session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
