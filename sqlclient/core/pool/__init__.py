"""
Connection handle and DB helpers for MySQL and PostgreSQL.

No driver layer: psycopg and pymysql are installed via pip; a flavor and a DSN are enough.
"""

from .connect import connect, cursor_to_result, execute, parse_dsn, resolve_flavor
from .health import health_check, ping
from .manager import ConnectionPool, PooledConnection

__all__ = [
    "connect",
    "execute",
    "parse_dsn",
    "resolve_flavor",
    "cursor_to_result",
    "health_check",
    "ping",
    "ConnectionPool",
    "PooledConnection",
]
