"""
Single-connection database client for interactive use (SQL shells, admin tools).

DBClient opens one handle capped at one open and one idle connection, keeps a
single cached connection, pings it before each query and replaces it when it
has been dropped. Every result value is rendered as a display string.

Not thread safe: the cached connection is one mutable slot. Use one client per
session and serialize calls.
"""

import logging
from types import TracebackType

from sqlclient.core.config import settings
from sqlclient.core.errors import (
    ConnectionAcquisitionError,
    ConnectionStringError,
    ConnectivityError,
    OpenError,
    QueryExecutionError,
    SessionSetupError,
    TeardownError,
)
from sqlclient.core.pool import (
    ConnectionPool,
    PooledConnection,
    cursor_to_result,
    resolve_flavor,
)
from sqlclient.models import DSNProducer, FlavorEnum, QueryResult

_log = logging.getLogger(__name__)

# Only one session is ever used, so session settings stay in effect
MAX_OPEN_CONNS = 1
MAX_IDLE_CONNS = 1

# Session statement applied to every fresh connection when safe mode is on
SAFE_MODE_STATEMENTS: dict[FlavorEnum, str] = {
    FlavorEnum.MYSQL: "SET SQL_SAFE_UPDATES = 1",
}


class DBClient:
    """
    DBClient(dsn_producer) -> connected client.

    query(sql) -> QueryResult | None
    destroy()  -> close cached connection and handle (or use as a context manager).
    """

    def __init__(self, dsn_producer: DSNProducer) -> None:
        try:
            dsn = dsn_producer.to_dsn()
        except Exception as e:
            raise ConnectionStringError("Failed to create connection string", e) from e

        try:
            flavor = resolve_flavor(dsn_producer.get_flavor())
        except ValueError as e:
            raise OpenError("Failed to open database", e) from e

        if dsn_producer.is_safe_mode() and flavor not in SAFE_MODE_STATEMENTS:
            raise SessionSetupError(f"Safe mode is not supported for {flavor.value}")

        try:
            handle = ConnectionPool(flavor, dsn)
        except Exception as e:
            raise OpenError("Failed to open database", e) from e

        try:
            handle.ping()
        except Exception as e:
            try:
                handle.close()
            except Exception:
                _log.debug("Failed to close handle after failed ping", exc_info=True)
            raise ConnectivityError("Failed to establish connection to database", e) from e

        handle.set_conn_max_lifetime(settings.CONN_MAX_LIFETIME_SEC)
        handle.set_max_open_conns(MAX_OPEN_CONNS)
        handle.set_max_idle_conns(MAX_IDLE_CONNS)

        self._handle = handle
        self._conn: PooledConnection | None = None
        self._dsn_producer = dsn_producer
        _log.info("Connected to %s database", flavor.value)

    def __enter__(self) -> "DBClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.destroy()

    @property
    def handle(self) -> ConnectionPool:
        return self._handle

    def destroy(self) -> None:
        """
        Release database resources. Call once, when the client is no longer needed.

        Closing the cached connection may fail if it is already closed; that is
        ignored. A failure to close the handle raises TeardownError.
        """
        if self._conn is not None:
            try:
                self._conn.close()
            except Exception:
                _log.debug("Ignoring error while closing cached connection", exc_info=True)

        try:
            self._handle.close()
        except Exception as e:
            raise TeardownError("Failed to close database", e) from e
        _log.info("Database client closed")

    def query(self, sql: str) -> QueryResult | None:
        """
        Run SQL and return the output in a displayable format.

        Returns None when the statement succeeded but produced no rows to display
        (e.g. UPDATE); that is not an error. SQL is executed verbatim.
        """
        conn = self._get_connection()

        try:
            cursor = conn.execute(sql)
        except Exception as e:
            raise QueryExecutionError("Query failed", e) from e

        return cursor_to_result(cursor)

    def _get_connection(self) -> PooledConnection:
        """
        Return the cached connection if it still answers a ping, otherwise a
        fresh one (with the safe-mode session statement applied).
        """
        if self._conn is not None:
            if self._conn.ping():
                return self._conn
            _log.warning("Cached database connection is dead, reconnecting")
            try:
                self._conn.close()
            except Exception:
                _log.debug("Ignoring error while closing dead connection", exc_info=True)
            self._conn = None

        try:
            conn = self._handle.acquire()
        except Exception as e:
            raise ConnectionAcquisitionError("Failed to get connection to database", e) from e

        if self._dsn_producer.is_safe_mode():
            self._apply_safe_mode(conn)

        self._conn = conn
        _log.debug("Cached new database connection")
        return conn

    def _apply_safe_mode(self, conn: PooledConnection) -> None:
        flavor = resolve_flavor(self._dsn_producer.get_flavor())
        statement = SAFE_MODE_STATEMENTS.get(flavor)
        if statement is None:
            conn.close()
            raise SessionSetupError(f"Safe mode is not supported for {flavor.value}")
        try:
            cur = conn.execute(statement)
            cur.close()
        except Exception as e:
            # Session state is unknown; do not hand this connection out again
            conn.mark_broken()
            conn.close()
            raise SessionSetupError("Failed to enable safe mode", e) from e
