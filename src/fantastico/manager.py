"""Topology manager: discovery, health checks and connection selection."""

import asyncio
import contextlib
import logging
from collections.abc import Coroutine
from typing import Any

from fantastico.config import TopologyConfig
from fantastico.handle import HandleFactory, WireHandle, redis_handle_factory
from fantastico.poller import HealthPoller
from fantastico.record import Address, ConnectionRecord, ConnectionView
from fantastico.registry import Registry
from fantastico.role import Role
from fantastico.selector import Selector
from fantastico.supervisor import ReconnectSupervisor

_LOGGER = logging.getLogger(__name__)


class TopologyManager:
    """Keeps track of a master/replica topology and hands out connections.

    Starting from one seed node, every node is polled with ROLE every
    ``check_interval`` seconds; the replicas (and masters) it reports are
    connected to and polled in turn. Failed nodes are dropped and retried
    after ``check_interval`` seconds.
    """

    def __init__(
        self,
        config: TopologyConfig | None = None,
        *,
        handle_factory: HandleFactory | None = None,
    ) -> None:
        """Initialize manager (does not connect yet).

        Args:
            config: Seed address and polling settings
            handle_factory: Builds the handle for a node, defaults to Redis
        """
        self._config = config or TopologyConfig()
        self._handle_factory = handle_factory or redis_handle_factory
        self._registry = Registry()
        self._selector = Selector(self._registry)
        self._supervisor = ReconnectSupervisor(
            self._registry,
            self.add_connection,
            check_interval=self._config.check_interval,
        )
        self._poller = HealthPoller(
            self._registry,
            self._supervisor,
            self.add_connection,
            check_interval=self._config.check_interval,
            discover_masters=self._config.discover_masters,
        )
        self._tasks: set[asyncio.Task[None]] = set()
        self._closed = False

    @property
    def config(self) -> TopologyConfig:
        return self._config

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def poller(self) -> HealthPoller:
        return self._poller

    @property
    def supervisor(self) -> ReconnectSupervisor:
        return self._supervisor

    @property
    def connections(self) -> tuple[ConnectionView, ...]:
        """All known connections, ready or not, in the order they were added."""
        return tuple(ConnectionView(record) for record in self._registry)

    async def initialize(self) -> None:
        """Connect to the seed node and start discovering from it."""
        self.add_connection(Address(self._config.host, self._config.port))

    def add_connection(self, address: Address) -> ConnectionRecord | None:
        """Start tracking a node.

        Returns the record for ``address``; an already known address keeps
        its existing record. Returns None once the manager is closed.
        """
        if self._closed:
            return None

        existing = self._registry.get(address.id)
        if existing is not None:
            return existing

        record = ConnectionRecord(
            address=address,
            handle=self._handle_factory(address, self._config.options),
        )
        self._registry.add(record)
        _LOGGER.info("Added connection %s", record.id)
        self._spawn(self._open(record))
        return record

    async def _open(self, record: ConnectionRecord) -> None:
        try:
            await record.handle.connect()
        except Exception as e:
            await self._supervisor.on_failure(record, e)
            return

        if record.killed:
            return

        self._poller.start(record)

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def find_next(self, role: Role, id: str | None = None) -> ConnectionView | None:
        """Get the next ready connection of a role, round robin."""
        return self._selector.find_next(role, id)

    def get_master(self, id: str | None = None) -> ConnectionView | None:
        """Get a ready master, or the master with ``id``."""
        return self.find_next(Role.MASTER, id)

    def get_slave(self, id: str | None = None) -> ConnectionView | None:
        """Get a ready slave.

        Falls back to a master when no slave is ready, unless a specific
        ``id`` was asked for.
        """
        connection = self.find_next(Role.SLAVE, id)
        if connection is None and id is None:
            return self.get_master()
        return connection

    def checkout(self, role: Role, id: str | None = None, **options: Any) -> WireHandle | None:
        """Create a new, untracked handle to a node of ``role``.

        Meant for long-lived dedicated sessions such as pub/sub. The handle
        is not connected yet and is never polled, rotated or reconnected;
        the caller owns it. ``options`` override the configured ones.

        Returns None if no node matches.
        """
        candidates = self._registry.find(role, id, ready=False)
        if not candidates:
            return None
        return self._handle_factory(candidates[0].address, {**self._config.options, **options})

    async def close(self) -> None:
        """Stop polling and reconnecting, and close every connection."""
        self._closed = True
        self._supervisor.cancel()
        self._poller.cancel()
        for task in list(self._tasks):
            task.cancel()

        records = self._registry.clear()
        for record in records:
            record.killed = True
            record.ready = False
            record.cancel_poll()

        await asyncio.gather(*self._tasks, return_exceptions=True)
        await self._poller.wait_idle()

        for record in records:
            with contextlib.suppress(Exception):
                await record.close()

    async def __aenter__(self) -> "TopologyManager":
        await self.initialize()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
