# src/week_planner/db/__init__.py
from __future__ import annotations
import time
import logging
import contextvars
from contextlib import contextmanager
from typing import Generator, Iterable

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from ..config import DATABASE_URL, DB_LOG, SQL_ECHO

# ---- Logging ---------------------------------------------------------------
# Controlled by env var DB_LOG:
#   off | summary | sql | full
# - summary: one-line per query (op, rows, ms)
# - sql: SQL text + trimmed params
# - full: summary + SQL + errors
_db_log_mode = DB_LOG
_LOG_SUMMARY = _db_log_mode in {"summary", "full"}
_LOG_SQL = _db_log_mode in {"sql", "full"}
_LOG_ERRORS = _db_log_mode in {"summary", "sql", "full"}

_logger = logging.getLogger("week_planner.sql")
if _db_log_mode != "off" and not _logger.handlers:
    # inherit root handlers; user can configure formatters globally
    _logger.setLevel(logging.INFO)

# correlation id for request-scoped logs
_request_id_ctx: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")


def set_request_id(rid: str) -> None:
    _request_id_ctx.set(str(rid))


def get_request_id() -> str:
    return _request_id_ctx.get()


def _short_params(p):
    if p is None:
        return None
    if isinstance(p, (list, tuple)):
        return [str(x)[:120] for x in p]
    if isinstance(p, dict):
        return {k: (str(v)[:120]) for k, v in p.items()}
    return str(p)[:120]


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def make_engine(url: str = DATABASE_URL, **kwargs) -> Engine:
    """Build an engine with the project's SQLite pragmas and query logging attached."""
    connect_args = {"check_same_thread": False, "timeout": 60} if _is_sqlite(url) else {}
    connect_args.update(kwargs.pop("connect_args", {}))
    eng = create_engine(
        url,
        future=True,
        echo=SQL_ECHO,
        connect_args=connect_args,
        pool_pre_ping=True,
        **kwargs,
    )
    if _is_sqlite(url):
        event.listen(eng, "connect", _set_sqlite_pragma)
    event.listen(eng, "before_cursor_execute", _log_before_execute)
    event.listen(eng, "after_cursor_execute", _log_after_execute)
    event.listen(eng, "handle_error", _log_error)
    return eng


def _set_sqlite_pragma(dbapi_conn, _):
    cursor = dbapi_conn.cursor()
    try:
        # planning_hebdo -> semaines/commandes
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.execute("PRAGMA busy_timeout=60000")  # ms
    finally:
        cursor.close()


def _log_before_execute(conn, cursor, statement, parameters, context, executemany):
    if _db_log_mode == "off":
        return
    stack = conn.info.setdefault("_query_start_time", [])
    stack.append(time.perf_counter())
    if _LOG_SQL:
        _logger.info("[%s] SQL: %s | params=%s", get_request_id(), statement, _short_params(parameters))


def _log_after_execute(conn, cursor, statement, parameters, context, executemany):
    if _db_log_mode == "off":
        return
    stack = conn.info.get("_query_start_time") or []
    start = stack.pop() if stack else None
    dur_ms = (time.perf_counter() - start) * 1000 if start else None
    if _LOG_SUMMARY:
        # crude op detection
        op = statement.strip().split(" ", 1)[0].upper() if statement else "SQL"
        _logger.info("[%s] %s rows=%s ms=%.2f", get_request_id(), op, getattr(cursor, "rowcount", None), (dur_ms or 0.0))


def _log_error(context):  # pragma: no cover
    if _LOG_ERRORS:
        err = context.original_exception
        _logger.warning(
            "[%s] DB-ERROR: %s | stmt=%s | params=%s",
            get_request_id(), err, context.statement, _short_params(context.parameters),
        )


# ---- Core objects ------------------------------------------------------------
engine: Engine = make_engine(DATABASE_URL)

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
    future=True,
    class_=Session,
)

Base = declarative_base()


# ---- Public API --------------------------------------------------------------
def init_db(bind: Engine | None = None) -> None:
    """
    Registers every model and creates the missing tables.
    Models must be imported before create_all so the tables land in the metadata.
    """
    from . import models  # noqa: F401  # pylint: disable=unused-import

    Base.metadata.create_all(bind=bind or engine)


@contextmanager
def session_scope() -> Iterable[Session]:
    """
    Context manager for short-lived DB work:
        with session_scope() as db:
            db.add(obj); ...
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a session that is closed after the request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
