from __future__ import annotations

import pytest

from joxtabot.logging_config import error_aggregator
from tests.fixtures.fake_transport import TransportFactory


@pytest.fixture
def transport_factory() -> TransportFactory:
    return TransportFactory()


@pytest.fixture(autouse=True)
def _reset_error_aggregator():
    """Keep error counts from one test out of the next."""
    yield
    error_aggregator.clear()
