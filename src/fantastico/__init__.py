"""Async master/replica topology discovery and connection selection for Redis."""

from typing import Any

from fantastico.config import TopologyConfig
from fantastico.exceptions import (
    CommandError,
    ConfigurationError,
    ConnectionError,
    FantasticoError,
    RoleQueryError,
)
from fantastico.handle import HandleFactory, RedisHandle, WireHandle
from fantastico.manager import TopologyManager
from fantastico.record import Address, ConnectionView
from fantastico.role import Role, RoleDescriptor, parse_role

__all__ = [
    "create",
    "TopologyManager",
    "TopologyConfig",
    "Address",
    "ConnectionView",
    "Role",
    "RoleDescriptor",
    "parse_role",
    "WireHandle",
    "HandleFactory",
    "RedisHandle",
    "FantasticoError",
    "ConnectionError",
    "CommandError",
    "RoleQueryError",
    "ConfigurationError",
]

__version__ = "0.1.0"


async def create(
    host: str = "127.0.0.1",
    port: int = 6379,
    *,
    options: dict[str, Any] | None = None,
    check_interval: float = 1.0,
    handle_factory: HandleFactory | None = None,
) -> TopologyManager:
    """Create a topology manager and start discovery from a seed node.

    Args:
        host: Seed node host
        port: Seed node port
        options: Keyword arguments for every node's Redis client
        check_interval: Seconds between polls and before reconnects
        handle_factory: Builds node handles, defaults to Redis

    Returns:
        An initialized TopologyManager
    """
    config = TopologyConfig(
        host=host,
        port=port,
        options=options or {},
        check_interval=check_interval,
    )
    manager = TopologyManager(config, handle_factory=handle_factory)
    await manager.initialize()
    return manager
