"""Pytest configuration for fantastico tests."""

from collections.abc import AsyncIterator

import pytest
from fakes import MASTER_ROLE, SLAVE_ROLE, FakeNetwork

from fantastico.config import TopologyConfig
from fantastico.manager import TopologyManager


@pytest.fixture
def network() -> FakeNetwork:
    """Create a three-node topology: one master, two slaves."""
    net = FakeNetwork()
    net.replies["10.0.0.1:6379"] = MASTER_ROLE
    net.replies["10.0.0.2:6379"] = SLAVE_ROLE
    net.replies["10.0.0.3:6379"] = SLAVE_ROLE
    return net


@pytest.fixture
def config() -> TopologyConfig:
    """Seed at the master, with polls far enough apart not to repeat in a test."""
    return TopologyConfig(
        host="10.0.0.1",
        port=6379,
        options={"socket_timeout": 1.0},
        check_interval=10.0,
    )


@pytest.fixture
async def manager(
    config: TopologyConfig, network: FakeNetwork
) -> AsyncIterator[TopologyManager]:
    """Create a manager wired to the fake network (not initialized)."""
    mgr = TopologyManager(config, handle_factory=network.factory)
    yield mgr
    await mgr.close()
