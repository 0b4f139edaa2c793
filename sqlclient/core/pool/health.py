"""
Connection liveness probes.
"""

from typing import Any

from sqlclient.core.config import settings

from .connect import execute


def ping(conn: Any) -> None:
    """Run the ping query (SELECT 1) on *conn*; driver errors propagate."""
    cur = execute(conn, settings.PING_QUERY)
    try:
        cur.fetchall()
    finally:
        cur.close()


def health_check(conn: Any) -> bool:
    """
    Run SELECT 1 and return True if no exception. Postgres and MySQL both support SELECT 1.
    """
    try:
        ping(conn)
        return True
    except Exception:
        return False
