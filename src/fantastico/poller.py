"""Periodic ROLE polling and topology discovery."""

import asyncio
import logging
from collections import deque
from collections.abc import Callable, Iterable

from fantastico.exceptions import CommandError, ConnectionError, RoleQueryError
from fantastico.handle import is_unknown_command
from fantastico.record import Address, ConnectionRecord
from fantastico.registry import Registry
from fantastico.role import PeerAddress, Role, RoleDescriptor, parse_role
from fantastico.supervisor import ReconnectSupervisor

_LOGGER = logging.getLogger(__name__)

# Reply used for servers without the ROLE command (standalone instances).
STANDALONE = RoleDescriptor(role=Role.MASTER, slaves=())


class HealthPoller:
    """Polls each connection's role and adds the peers it reports."""

    def __init__(
        self,
        registry: Registry,
        supervisor: ReconnectSupervisor,
        add_connection: Callable[[Address], ConnectionRecord | None],
        *,
        check_interval: float,
        discover_masters: bool = True,
    ) -> None:
        """Initialize poller.

        Args:
            registry: Registry of known connections
            supervisor: Receives connections whose transport failed
            add_connection: Called for every newly discovered address
            check_interval: Delay between two polls of a connection, in seconds
            discover_masters: Also follow a slave's reported master
        """
        self._registry = registry
        self._supervisor = supervisor
        self._add_connection = add_connection
        self._check_interval = check_interval
        self._discover_masters = discover_masters
        self._tasks: set[asyncio.Task[None]] = set()

    def start(self, record: ConnectionRecord) -> None:
        """Begin polling a freshly connected record."""
        self._spawn(record)

    def _schedule(self, record: ConnectionRecord) -> None:
        if record.killed:
            return
        record.cancel_poll()
        loop = asyncio.get_running_loop()
        record.poll_timer = loop.call_later(self._check_interval, self._spawn, record)

    def _spawn(self, record: ConnectionRecord) -> None:
        record.poll_timer = None
        if record.killed:
            return
        task = asyncio.ensure_future(self._run(record))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, record: ConnectionRecord) -> None:
        try:
            await self.poll(record)
        except RoleQueryError:
            _LOGGER.exception("Polling %s failed", record.id)

    async def poll(self, record: ConnectionRecord) -> RoleDescriptor | None:
        """Query the role of ``record`` once.

        The next poll is scheduled before the reply is looked at, so a
        connection keeps being polled through failures.

        Returns the parsed descriptor, or None if there was nothing to apply.

        Raises:
            RoleQueryError: The server rejected the ROLE command or sent a
                reply that could not be parsed
        """
        if record.killed:
            return None

        error: ConnectionError | CommandError | None = None
        try:
            response = await record.handle.send_command("ROLE")
        except (ConnectionError, CommandError) as e:
            response, error = None, e

        self._schedule(record)

        if record.killed:
            return None

        if isinstance(error, ConnectionError):
            await self._supervisor.on_failure(record, error)
            return None

        if error is not None and not is_unknown_command(error):
            record.ready = False
            raise RoleQueryError(record.id, str(error)) from error

        try:
            descriptor = STANDALONE if error is not None else parse_role(response)
        except (IndexError, TypeError, ValueError) as e:
            record.ready = False
            raise RoleQueryError(record.id, f"Malformed ROLE reply {response!r}") from e

        if descriptor is None:
            _LOGGER.debug("Unrecognised ROLE reply from %s: %r", record.id, response)
            record.ready = True
            return None

        previous = record.role
        record.apply(descriptor)
        if previous != record.role:
            _LOGGER.info("%s is now %s", record.id, record.role)

        self.discover(self._peers(descriptor))
        return descriptor

    def _peers(self, descriptor: RoleDescriptor) -> list[PeerAddress]:
        if self._discover_masters:
            return descriptor.peers
        return [slave.address for slave in descriptor.slaves or ()]

    def discover(self, peers: Iterable[PeerAddress]) -> list[ConnectionRecord]:
        """Add a connection for every peer not in the registry yet.

        Returns the records that were created.
        """
        queue = deque(Address.from_peer(peer) for peer in peers)
        seen: set[str] = set()
        added: list[ConnectionRecord] = []

        while queue:
            address = queue.popleft()
            if address.id in seen or address in self._registry:
                continue
            seen.add(address.id)

            _LOGGER.info("Discovered %s", address)
            record = self._add_connection(address)
            if record is not None:
                added.append(record)

        return added

    def cancel(self) -> None:
        """Cancel polls that are in flight."""
        for task in list(self._tasks):
            task.cancel()

    async def wait_idle(self) -> None:
        """Wait for polls that are in flight to finish."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
