from collections.abc import Generator
from unittest.mock import patch

import pytest

from tests.utils.fakes import FakeServer


@pytest.fixture
def server() -> Generator[FakeServer, None, None]:
    """Route every dial of ConnectionPool to an in-memory FakeServer."""
    srv = FakeServer()
    with patch("sqlclient.core.pool.manager.connect", side_effect=srv.connect):
        yield srv
