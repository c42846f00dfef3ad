"""
PostgreSQL connection helper for vaultgate.

The audit sink and subject store open a short-lived psycopg connection per
call from a worker thread. Connection attempts are bounded by
POSTGRES_CONNECT_TIMEOUT_SECONDS so a dead database fails the call instead
of hanging the thread past the orchestrator's dependency timeout.
"""

import psycopg
from loguru import logger

from vaultgate_core.config import settings


def get_db_connection(dsn: str | None = None) -> psycopg.Connection:
    """
    Open a PostgreSQL connection for one audit or subject query.

    Usage:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) FROM audit_records")

    Args:
        dsn: Connection string. Defaults to settings.POSTGRES_DSN.

    Returns:
        psycopg.Connection, closed when its context exits.
    """
    try:
        conn = psycopg.connect(
            dsn or settings.POSTGRES_DSN,
            connect_timeout=settings.POSTGRES_CONNECT_TIMEOUT_SECONDS,
            application_name=settings.SERVICE_NAME,
        )
    except psycopg.Error as e:
        logger.error(f"Failed to connect to PostgreSQL: {e}")
        raise
    logger.debug(f"Connected to PostgreSQL at {conn.info.host}:{conn.info.port}")
    return conn
