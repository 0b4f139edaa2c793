"""
Database handle: dials connections for one DSN and keeps a tiny pool.

Caps open and idle connections, evicts connections older than the max
lifetime, and health-checks borrowed connections on demand. Opening a
handle parses the DSN but does not dial; use ping() for that.
"""

import logging
import threading
import time
from typing import Any, NamedTuple

from sqlclient.core.config import settings
from sqlclient.core.errors import (
    ConnectionClosedError,
    PoolClosedError,
    PoolExhaustedError,
)
from sqlclient.models import FlavorEnum

from .connect import connect, execute, parse_dsn, resolve_flavor
from .health import health_check
from .health import ping as ping_conn

_log = logging.getLogger(__name__)


class _PoolEntry(NamedTuple):
    conn: Any
    created_at: float  # time.monotonic() when the connection was opened


class PooledConnection:
    """A connection borrowed from a ConnectionPool. close() hands it back."""

    def __init__(self, pool: "ConnectionPool", conn: Any, created_at: float) -> None:
        self._pool = pool
        self._conn = conn
        self.created_at = created_at  # time.monotonic() when the connection was opened
        self._closed = False
        self._broken = False

    @property
    def raw(self) -> Any:
        return self._conn

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def broken(self) -> bool:
        return self._broken

    def mark_broken(self) -> None:
        """Discard the driver connection on close instead of pooling it."""
        self._broken = True

    def ping(self) -> bool:
        """Lightweight liveness probe. A failed probe marks the connection broken."""
        if self._closed:
            return False
        if health_check(self._conn):
            return True
        self._broken = True
        return False

    def execute(self, sql: str) -> Any:
        """Execute SQL verbatim; returns the open cursor."""
        if self._closed:
            raise ConnectionClosedError("connection is closed")
        return execute(self._conn, sql)

    def close(self) -> None:
        """Return the connection to its pool. Raises ConnectionClosedError if already closed."""
        if self._closed:
            raise ConnectionClosedError("connection already closed")
        self._closed = True
        self._pool.release(self)


class ConnectionPool:
    """Connection handle for one flavor + DSN, capped at max_open / max_idle."""

    def __init__(
        self,
        flavor: FlavorEnum | str,
        dsn: str,
        *,
        max_lifetime: float | None = None,
        max_open: int = 1,
        max_idle: int = 1,
    ) -> None:
        self.flavor = resolve_flavor(flavor)
        self._params = parse_dsn(self.flavor, dsn)
        self._lock = threading.Lock()
        self._idle: list[_PoolEntry] = []
        self._num_open = 0
        self._closed = False
        self._max_lifetime = float(
            settings.CONN_MAX_LIFETIME_SEC if max_lifetime is None else max_lifetime
        )
        self._max_open = max_open
        self._max_idle = min(max_idle, max_open)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_conn_max_lifetime(self, seconds: float) -> None:
        """Connections older than this are closed instead of reused. <= 0 means forever."""
        with self._lock:
            self._max_lifetime = float(seconds)
            expired = self._evict_expired_locked()
        self._close_all(expired)

    def set_max_open_conns(self, n: int) -> None:
        if n < 1:
            raise ValueError("max_open must be >= 1")
        with self._lock:
            self._max_open = n
            self._max_idle = min(self._max_idle, n)
            extra = self._trim_idle_locked()
        self._close_all(extra)

    def set_max_idle_conns(self, n: int) -> None:
        if n < 0:
            raise ValueError("max_idle must be >= 0")
        with self._lock:
            self._max_idle = min(n, self._max_open)
            extra = self._trim_idle_locked()
        self._close_all(extra)

    # ------------------------------------------------------------------
    # Connections
    # ------------------------------------------------------------------

    def ping(self) -> None:
        """Dial (or reuse) a connection and run SELECT 1 on it; errors propagate."""
        conn = self.acquire()
        try:
            ping_conn(conn.raw)
        except Exception:
            conn.mark_broken()
            raise
        finally:
            conn.close()

    def acquire(self) -> PooledConnection:
        """
        Borrow an idle connection if it still answers a ping, or dial a new one
        when a slot is free. Dead idle connections are closed and skipped.
        """
        while True:
            with self._lock:
                if self._closed:
                    raise PoolClosedError("database is closed")
                expired = self._evict_expired_locked()
                entry = self._idle.pop() if self._idle else None
                exhausted = entry is None and self._num_open >= self._max_open
                if entry is None and not exhausted:
                    # Reserve the slot before dialing outside the lock
                    self._num_open += 1
            self._close_all(expired)

            if entry is None:
                break
            if health_check(entry.conn):
                return PooledConnection(self, entry.conn, entry.created_at)
            _log.debug("Discarding dead idle %s connection", self.flavor.value)
            with self._lock:
                self._num_open -= 1
            self._close_quiet(entry.conn)

        if exhausted:
            raise PoolExhaustedError(f"all {self._max_open} connection(s) are in use")

        try:
            raw = connect(self.flavor, self._params)
        except Exception:
            with self._lock:
                self._num_open -= 1
            raise
        _log.debug("Opened new %s connection", self.flavor.value)
        return PooledConnection(self, raw, time.monotonic())

    def release(self, conn: PooledConnection) -> None:
        """Take a connection back: keep it idle, or close it if broken, expired or over cap."""
        entry = _PoolEntry(conn=conn.raw, created_at=conn.created_at)
        with self._lock:
            keep = (
                not self._closed
                and not conn.broken
                and not self._is_expired(entry)
                and len(self._idle) < self._max_idle
            )
            if keep:
                self._idle.append(entry)
                return
            self._num_open -= 1
        self._close_quiet(entry.conn)

    def close(self) -> None:
        """
        Close idle connections and refuse new ones. Borrowed connections are closed
        when handed back. Idempotent; the first driver close error is raised.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            entries = self._idle
            self._idle = []
            self._num_open -= len(entries)
        first_error: Exception | None = None
        for e in entries:
            try:
                e.conn.close()
            except Exception as exc:
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error

    @property
    def closed(self) -> bool:
        return self._closed

    def stats(self) -> dict[str, int]:
        """Return pool statistics for monitoring."""
        with self._lock:
            return {
                "open_connections": self._num_open,
                "idle_connections": len(self._idle),
                "in_use": self._num_open - len(self._idle),
                "max_open": self._max_open,
                "max_idle": self._max_idle,
            }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _is_expired(self, entry: _PoolEntry) -> bool:
        if self._max_lifetime <= 0:
            return False
        return (time.monotonic() - entry.created_at) > self._max_lifetime

    def _evict_expired_locked(self) -> list[_PoolEntry]:
        expired = [e for e in self._idle if self._is_expired(e)]
        if expired:
            self._idle = [e for e in self._idle if e not in expired]
            self._num_open -= len(expired)
        return expired

    def _trim_idle_locked(self) -> list[_PoolEntry]:
        extra = self._idle[self._max_idle :]
        if extra:
            del self._idle[self._max_idle :]
            self._num_open -= len(extra)
        return extra

    def _close_all(self, entries: list[_PoolEntry]) -> None:
        for e in entries:
            self._close_quiet(e.conn)

    @staticmethod
    def _close_quiet(conn: Any) -> None:
        try:
            conn.close()
        except Exception:
            _log.debug("Ignoring error while closing connection", exc_info=True)
