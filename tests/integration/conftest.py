"""Integration test fixtures for fantastico.

These tests require a running Redis master (optionally with replicas).
Point them at the master with:
    FANTASTICO_TEST_REDIS=localhost:6379 pytest -m integration
"""

import os

import pytest

FANTASTICO_TEST_REDIS = os.environ.get("FANTASTICO_TEST_REDIS")


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "integration: marks tests as requiring a Redis server")


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if FANTASTICO_TEST_REDIS:
        return
    skip = pytest.mark.skip(reason="FANTASTICO_TEST_REDIS not set")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


@pytest.fixture
def redis_address() -> str:
    """Get the test master address."""
    return FANTASTICO_TEST_REDIS or "localhost:6379"
