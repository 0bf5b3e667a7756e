"""Teardown and delayed re-creation of failed connections."""

import asyncio
import contextlib
import logging
from collections.abc import Callable

from fantastico.record import Address, ConnectionRecord
from fantastico.registry import Registry

_LOGGER = logging.getLogger(__name__)


class ReconnectSupervisor:
    """Removes dead connections and re-adds their address after a fixed delay."""

    def __init__(
        self,
        registry: Registry,
        reconnect: Callable[[Address], object],
        *,
        check_interval: float,
    ) -> None:
        """Initialize supervisor.

        Args:
            registry: Registry the dead records are removed from
            reconnect: Called with the address once the delay has passed
            check_interval: Delay before reconnecting, in seconds
        """
        self._registry = registry
        self._reconnect = reconnect
        self._check_interval = check_interval
        self._timers: dict[str, asyncio.TimerHandle] = {}

    @property
    def pending(self) -> list[str]:
        """Ids of addresses waiting to be reconnected."""
        return list(self._timers)

    async def on_failure(self, record: ConnectionRecord, error: BaseException | None = None) -> bool:
        """Tear down a failed record and schedule its replacement.

        Returns False if the record had already been torn down.
        """
        if record.killed:
            return False

        record.killed = True
        record.ready = False
        record.cancel_poll()
        self._registry.remove(record)
        _LOGGER.warning(
            "Connection to %s failed, reconnecting in %ss: %s",
            record.id,
            self._check_interval,
            error,
        )
        self._schedule(record.address)

        # The handle is usually already broken; closing it may fail as well.
        with contextlib.suppress(Exception):
            await record.close()

        return True

    def _schedule(self, address: Address) -> None:
        if address.id in self._timers:
            return
        loop = asyncio.get_running_loop()
        self._timers[address.id] = loop.call_later(self._check_interval, self._fire, address)

    def _fire(self, address: Address) -> None:
        self._timers.pop(address.id, None)
        _LOGGER.info("Reconnecting to %s", address)
        self._reconnect(address)

    def cancel(self) -> None:
        """Drop every pending reconnect."""
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
