"""Pytest configuration and shared fixtures for credential testing."""

import pytest
from datetime import datetime, timedelta, timezone

from selfsigned import TLSConfig, build_tls_config, common_name, not_after


@pytest.fixture
def default_tls_config() -> TLSConfig:
    """Credential built with no options."""
    return build_tls_config()


@pytest.fixture
def example_not_after() -> datetime:
    """A not-after one year out, truncated to the second."""
    return (datetime.now(timezone.utc) + timedelta(days=365)).replace(microsecond=0)


@pytest.fixture
def example_tls_config(example_not_after: datetime) -> TLSConfig:
    """Credential for example.com with an explicit not-after."""
    return build_tls_config(common_name("example.com"), not_after(example_not_after))


@pytest.fixture
def mock_timestamp():
    """Provide a consistent timestamp for testing."""
    return datetime(2025, 1, 1, 0, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def expired_timestamp():
    """Provide an expired timestamp for testing."""
    return datetime(2023, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
