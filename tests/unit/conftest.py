"""
Shared fixtures for unit tests.

The HTTP session is replaced by fakes.FakeSession, so nothing here touches
the network.
"""

import pytest

from core.config import KrakenConfig
from core.rate_limit import TokenBucket
from exchanges.kraken.api_client import KrakenAPIClient
from fakes import FakeSession


@pytest.fixture
def config():
    """Fast config: no backoff delay and a bucket that never runs dry in tests."""
    return KrakenConfig(
        base_url="https://api.kraken.test",
        user_agent="kraken_client/test",
        timeout=5,
        max_retries=3,
        retry_delay_ms=0,
        rate_limit_capacity=100,
        rate_limit_refill_rate=100.0,
    )


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def api_client(config, fake_session):
    """KrakenAPIClient wired to a FakeSession (no real HTTP)."""
    client = KrakenAPIClient(
        config,
        rate_limiter=TokenBucket(config.rate_limit_capacity, config.rate_limit_refill_rate)
    )
    client.session = fake_session
    return client
