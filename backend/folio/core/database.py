"""
Database configuration and session management
"""
import logging
import time
from typing import Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from folio.core.config import get_settings
from folio.core.logging_config import LoggingConfig
from folio.core.metrics import db_queries_total, db_query_duration_seconds

# Lazy initialization - don't create engine at module level
_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None

Base = declarative_base()


def _setup_db_metrics(engine):
    """Setup SQLAlchemy event listeners for database metrics"""

    @event.listens_for(engine, "before_cursor_execute")
    def receive_before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault('query_start_time', []).append(time.time())

    @event.listens_for(engine, "after_cursor_execute")
    def receive_after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        if not conn.info.get('query_start_time'):
            return
        duration = time.time() - conn.info['query_start_time'].pop()
        words = statement.strip().split()
        operation = words[0].lower() if words else "unknown"
        table = "unknown"
        upper = [w.upper() for w in words]
        if operation == "update" and len(words) > 1:
            table = words[1]
        else:
            for marker in ("FROM", "INTO"):
                if marker in upper:
                    idx = upper.index(marker)
                    if idx + 1 < len(words):
                        table = words[idx + 1]
                    break
        table = table.lower().strip(';').strip('"')
        db_queries_total.labels(operation=operation, table=table).inc()
        db_query_duration_seconds.labels(operation=operation, table=table).observe(duration)


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    if "postgresql" in url:
        return {
            "connect_timeout": 5,
            "options": "-c statement_timeout=5000",
        }
    return {}


def get_engine():
    """Get or create database engine (lazy initialization)"""
    global _engine
    if _engine is None:
        settings = get_settings()
        LoggingConfig.configure()

        url = settings.database_url
        kwargs = {
            "echo": settings.log_sqlalchemy,
            "connect_args": _connect_args(url),
        }
        if url.startswith("sqlite"):
            if ":memory:" in url or url.rstrip("/") == "sqlite:":
                # One shared connection so every session sees the same in-memory database
                kwargs["poolclass"] = StaticPool
        else:
            kwargs.update(
                pool_size=settings.database_pool_size,
                max_overflow=settings.database_max_overflow,
                pool_pre_ping=True,
            )

        _engine = create_engine(url, **kwargs)

        sqlalchemy_logger = logging.getLogger("sqlalchemy.engine")
        if not settings.log_sqlalchemy:
            sqlalchemy_logger.setLevel(logging.WARNING)
            sqlalchemy_logger.propagate = False

        _setup_db_metrics(_engine)

    return _engine


def get_session_local():
    """Get or create session factory (lazy initialization)"""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _SessionLocal


def __getattr__(name):
    """Module-level `engine` and `SessionLocal` resolve lazily"""
    if name == 'engine':
        return get_engine()
    elif name == 'SessionLocal':
        return get_session_local()
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


def init_db():
    """Create all tables (used for SQLite/dev; production uses Alembic)"""
    import folio.models  # noqa: F401
    Base.metadata.create_all(bind=get_engine())


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for getting database session
    """
    SessionLocal = get_session_local()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
