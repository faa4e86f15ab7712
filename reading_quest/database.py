"""PostgreSQL connections shared by the repositories."""
import logging
from contextlib import contextmanager
from typing import Callable, Optional, Tuple

import psycopg2
from psycopg2 import pool
from psycopg2.extensions import connection as PgConnection
from psycopg2.extras import RealDictCursor

from reading_quest.config import get_settings

logger = logging.getLogger(__name__)

_connection_pool: Optional[pool.ThreadedConnectionPool] = None


def initialize_connection_pool(minconn: int = 2, maxconn: int = 20) -> None:
    """Open the process-wide pool; repeated calls are ignored."""
    global _connection_pool

    if _connection_pool is not None:
        logger.warning("Connection pool already initialized")
        return

    db_config = get_settings().db_config
    try:
        _connection_pool = pool.ThreadedConnectionPool(
            minconn, maxconn, cursor_factory=RealDictCursor, **db_config
        )
    except psycopg2.Error as e:
        logger.error(f"Could not open pool to {db_config['host']}/{db_config['dbname']}: {e}")
        raise
    logger.info(f"Database connection pool ready (min={minconn}, max={maxconn})")


def close_connection_pool() -> None:
    global _connection_pool

    if _connection_pool is None:
        return
    _connection_pool.closeall()
    _connection_pool = None
    logger.info("Database connection pool closed")


def _acquire() -> Tuple[PgConnection, Callable[[], None]]:
    """Return a connection and the callable that gives it back."""
    active_pool = _connection_pool
    if active_pool is None:
        # scripts and tests run without the app's startup hook
        logger.warning("Connection pool not initialized, using direct connection")
        conn = psycopg2.connect(cursor_factory=RealDictCursor, **get_settings().db_config)
        return conn, conn.close

    conn = active_pool.getconn()
    return conn, lambda: active_pool.putconn(conn)


@contextmanager
def get_db_connection():
    """Yield a connection for one unit of work.

    Callers commit explicitly. Any exception escaping the block rolls the
    open transaction back before the connection is released.
    """
    conn, release = _acquire()
    try:
        yield conn
    except Exception as e:
        logger.error(f"Rolling back after database error: {e}")
        conn.rollback()
        raise
    finally:
        release()


def check_database() -> bool:
    """Run ``SELECT 1``; False when the database cannot be reached."""
    try:
        with get_db_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1")
                cur.fetchone()
    except psycopg2.Error as e:
        logger.error(f"Database health check failed: {e}")
        return False
    return True
