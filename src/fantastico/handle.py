"""Wire handles: the per-node client the topology manager drives."""

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, Protocol

import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError
from redis.exceptions import TimeoutError as RedisTimeoutError

from fantastico.exceptions import CommandError, ConnectionError

if TYPE_CHECKING:
    from fantastico.record import Address


class WireHandle(Protocol):
    """Client for a single node.

    ``connect`` and ``send_command`` raise :class:`ConnectionError` on
    transport failures and :class:`CommandError` on server error replies.
    """

    async def connect(self) -> None: ...

    async def send_command(self, name: str, *args: Any) -> Any: ...

    async def close(self) -> None: ...


HandleFactory = Callable[["Address", Mapping[str, Any]], WireHandle]


def is_unknown_command(error: BaseException) -> bool:
    """Check if a command failed because the server does not know it."""
    return "unknown command" in str(error).lower()


class RedisHandle:
    """Wire handle backed by ``redis.asyncio.Redis``."""

    def __init__(self, address: "Address", options: Mapping[str, Any] | None = None) -> None:
        """Initialize handle (does not connect yet).

        Args:
            address: Node address
            options: Keyword arguments passed to ``redis.asyncio.Redis``
        """
        self._address = address
        self._options = dict(options or {})
        self._client: redis.Redis | None = None

    @property
    def address(self) -> "Address":
        """Get the node address."""
        return self._address

    @property
    def is_connected(self) -> bool:
        """Check if connected."""
        return self._client is not None

    @property
    def client(self) -> redis.Redis:
        """Get the underlying Redis client for application commands."""
        if self._client is None:
            raise ConnectionError("Not connected")
        return self._client

    async def connect(self) -> None:
        """Open the connection and verify it with a PING."""
        if self._client is not None:
            return

        client = redis.Redis(host=self._address.host, port=self._address.port, **self._options)

        try:
            await self._ping(client)
        except BaseException:
            await client.aclose()
            raise

        self._client = client

    async def _ping(self, client: redis.Redis) -> None:
        try:
            await client.ping()
        except RedisTimeoutError as e:
            raise ConnectionError(f"Connection to {self._address} timed out") from e
        except (RedisConnectionError, OSError) as e:
            raise ConnectionError(f"Failed to connect to {self._address}: {e}") from e
        except ResponseError as e:
            raise CommandError(str(e)) from e

    async def send_command(self, name: str, *args: Any) -> Any:
        """Send a raw command and return the raw reply."""
        client = self.client

        try:
            return await client.execute_command(name, *args)
        except (RedisConnectionError, RedisTimeoutError, OSError) as e:
            raise ConnectionError(f"Lost connection to {self._address}: {e}") from e
        except ResponseError as e:
            raise CommandError(str(e)) from e

    async def close(self) -> None:
        """Close the connection."""
        if self._client is not None:
            client, self._client = self._client, None
            await client.aclose()

    async def __aenter__(self) -> "RedisHandle":
        await self.connect()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()


def redis_handle_factory(address: "Address", options: Mapping[str, Any]) -> WireHandle:
    """Default :data:`HandleFactory` building :class:`RedisHandle` objects."""
    return RedisHandle(address, options)
