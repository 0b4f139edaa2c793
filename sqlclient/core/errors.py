"""
Error taxonomy for sqlclient.

Every error carries a short context message ("what failed") and keeps the
driver exception as ``__cause__`` ("why"). ``str(err)`` shows both.
"""


class DBClientError(Exception):
    """Base class for all sqlclient errors."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        if self.__cause__ is not None:
            return f"{self.message}: {self.__cause__}"
        return self.message


class ConnectionStringError(DBClientError):
    """The DSN producer failed to build a connection string."""


class OpenError(DBClientError):
    """The handle could not be initialised (unknown flavor, bad DSN)."""


class ConnectivityError(DBClientError):
    """The database was unreachable when the client was created."""


class ConnectionAcquisitionError(DBClientError):
    """The handle could not hand out a connection."""


class SessionSetupError(DBClientError):
    """A session statement (safe mode) failed on a fresh connection."""


class QueryExecutionError(DBClientError):
    """The SQL statement itself failed."""


class ColumnReadError(DBClientError):
    """Result-set column metadata could not be read."""


class RowScanError(DBClientError):
    """A row could not be materialised into strings."""


class CursorCloseError(DBClientError):
    """The row cursor could not be released after reading results."""


class TeardownError(DBClientError):
    """Closing the handle failed."""


class PoolExhaustedError(DBClientError):
    """All connection slots of the handle are in use."""


class PoolClosedError(DBClientError):
    """The handle was already closed."""


class ConnectionClosedError(DBClientError):
    """The connection was already closed or returned to the handle."""
