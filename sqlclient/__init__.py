"""
sqlclient: a single-connection MySQL / PostgreSQL query client that renders results as strings.
"""

from sqlclient.client import DBClient
from sqlclient.core.errors import (
    ColumnReadError,
    ConnectionAcquisitionError,
    ConnectionClosedError,
    ConnectionStringError,
    ConnectivityError,
    CursorCloseError,
    DBClientError,
    OpenError,
    PoolClosedError,
    PoolExhaustedError,
    QueryExecutionError,
    RowScanError,
    SessionSetupError,
    TeardownError,
)
from sqlclient.core.result_transform import NULL_MARKER
from sqlclient.models import DataSource, DSNProducer, FlavorEnum, QueryResult

__all__ = [
    "DBClient",
    "DataSource",
    "DSNProducer",
    "FlavorEnum",
    "QueryResult",
    "NULL_MARKER",
    "DBClientError",
    "ConnectionStringError",
    "OpenError",
    "ConnectivityError",
    "ConnectionAcquisitionError",
    "SessionSetupError",
    "QueryExecutionError",
    "ColumnReadError",
    "RowScanError",
    "CursorCloseError",
    "TeardownError",
    "PoolExhaustedError",
    "PoolClosedError",
    "ConnectionClosedError",
]
