"""In-memory stand-ins for Redis nodes."""

import asyncio
from collections.abc import Mapping
from typing import Any

from fantastico.exceptions import ConnectionError
from fantastico.record import Address, ConnectionRecord
from fantastico.role import Role

MASTER_ROLE = [
    "master",
    3129659,
    [["10.0.0.2", "6379", "3129659"], ["10.0.0.3", "6379", "3129543"]],
]
SLAVE_ROLE = ["slave", "10.0.0.1", 6379, "connected", 3129659]


class FakeHandle:
    """In-memory WireHandle answering from a FakeNetwork."""

    def __init__(self, network: "FakeNetwork", address: Address, options: dict[str, Any]) -> None:
        self.network = network
        self.address = address
        self.options = options
        self.commands: list[tuple[str, tuple[Any, ...]]] = []
        self.connected = False
        self.close_count = 0

    async def connect(self) -> None:
        if self.address.id in self.network.unreachable:
            raise ConnectionError(f"Failed to connect to {self.address}")
        if self.address.id in self.network.connect_errors:
            raise self.network.connect_errors[self.address.id]
        self.connected = True

    async def send_command(self, name: str, *args: Any) -> Any:
        self.commands.append((name, args))
        reply = self.network.replies.get(self.address.id)
        if isinstance(reply, BaseException):
            raise reply
        return reply

    async def close(self) -> None:
        self.close_count += 1
        self.connected = False


class FakeNetwork:
    """ROLE replies by node id, plus the handles created so far."""

    def __init__(self) -> None:
        self.replies: dict[str, Any] = {}
        self.unreachable: set[str] = set()
        self.connect_errors: dict[str, BaseException] = {}
        self.handles: list[FakeHandle] = []

    def factory(self, address: Address, options: Mapping[str, Any]) -> FakeHandle:
        handle = FakeHandle(self, address, dict(options))
        self.handles.append(handle)
        return handle

    def created(self, id: str) -> list[FakeHandle]:
        return [handle for handle in self.handles if handle.address.id == id]


def make_record(
    id: int | str,
    role: Role,
    ready: bool,
    network: FakeNetwork | None = None,
) -> ConnectionRecord:
    """Build a record for host ``node<id>`` without a manager."""
    address = Address(f"node{id}", 6379)
    network = network or FakeNetwork()
    return ConnectionRecord(
        address=address,
        handle=network.factory(address, {}),
        role=role,
        ready=ready,
    )


async def settle() -> None:
    """Let pending connect and poll tasks run."""
    await asyncio.sleep(0.01)
