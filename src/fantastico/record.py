"""Connection records and the read-only view handed to callers."""

import asyncio
from dataclasses import dataclass, field
from typing import Any

from fantastico.handle import WireHandle
from fantastico.role import PeerAddress, Role, RoleDescriptor, SlaveInfo


@dataclass(frozen=True, slots=True)
class Address:
    """Host/port pair identifying a node."""

    host: Any
    port: Any

    @property
    def id(self) -> str:
        """Stable lookup key, ``"host:port"``."""
        return f"{self.host}:{self.port}"

    @classmethod
    def parse(cls, address: str) -> "Address":
        """Build an address from ``"host:port"``."""
        host, port_str = address.rsplit(":", 1)
        return cls(host, int(port_str))

    @classmethod
    def from_peer(cls, peer: PeerAddress) -> "Address":
        return cls(peer.host, peer.port)

    def __str__(self) -> str:
        return self.id


@dataclass(eq=False)
class ConnectionRecord:
    """A known node: its address, its handle and what the last poll said.

    The handle belongs to the record and is closed exactly once, by
    :meth:`close`. ``killed`` is set once the record has been torn down and
    stops any further polling or reconnect scheduling for it.
    """

    address: Address
    handle: WireHandle
    role: Role = Role.UNKNOWN
    ready: bool = False
    offset: int | None = None
    status: str | None = None
    master: PeerAddress | None = None
    slaves: tuple[SlaveInfo, ...] = ()
    masters: tuple[str, ...] = ()
    killed: bool = False
    poll_timer: asyncio.TimerHandle | None = field(default=None, repr=False)
    _closed: bool = field(default=False, repr=False)

    @property
    def id(self) -> str:
        return self.address.id

    @property
    def host(self) -> Any:
        return self.address.host

    @property
    def port(self) -> Any:
        return self.address.port

    def apply(self, descriptor: RoleDescriptor) -> None:
        """Replace the role metadata with the contents of ``descriptor``.

        All fields are overwritten together so values from an earlier role
        never linger next to the new ones.
        """
        self.role = descriptor.role
        self.offset = descriptor.offset
        self.status = descriptor.status
        self.master = descriptor.master
        self.slaves = descriptor.slaves or ()
        self.masters = descriptor.masters or ()
        self.ready = descriptor.ready if descriptor.ready is not None else True

    def cancel_poll(self) -> None:
        if self.poll_timer is not None:
            self.poll_timer.cancel()
            self.poll_timer = None

    async def close(self) -> None:
        """Close the handle. Only the first call has any effect."""
        if self._closed:
            return
        self._closed = True
        await self.handle.close()


class ConnectionView:
    """Caller-facing view over a record and its handle.

    Metadata accessors read through to the live record; ``handle`` and
    :meth:`send_command` reach the node itself.
    """

    __slots__ = ("_record",)

    def __init__(self, record: ConnectionRecord) -> None:
        self._record = record

    @property
    def id(self) -> str:
        return self._record.id

    @property
    def address(self) -> Address:
        return self._record.address

    @property
    def host(self) -> Any:
        return self._record.host

    @property
    def port(self) -> Any:
        return self._record.port

    @property
    def role(self) -> Role:
        return self._record.role

    @property
    def ready(self) -> bool:
        return self._record.ready

    @property
    def offset(self) -> int | None:
        return self._record.offset

    @property
    def status(self) -> str | None:
        return self._record.status

    @property
    def master(self) -> PeerAddress | None:
        return self._record.master

    @property
    def slaves(self) -> tuple[SlaveInfo, ...]:
        return self._record.slaves

    @property
    def masters(self) -> tuple[str, ...]:
        """Master names a sentinel monitors."""
        return self._record.masters

    @property
    def handle(self) -> WireHandle:
        return self._record.handle

    async def send_command(self, name: str, *args: Any) -> Any:
        """Send a command on the node's handle."""
        return await self._record.handle.send_command(name, *args)

    def as_dict(self) -> dict[str, Any]:
        """Plain snapshot of the metadata, for diagnostics."""
        record = self._record
        return {
            "id": record.id,
            "host": record.host,
            "port": record.port,
            "role": str(record.role),
            "ready": record.ready,
            "offset": record.offset,
            "status": record.status,
            "master": (
                {"host": record.master.host, "port": record.master.port}
                if record.master is not None
                else None
            ),
            "slaves": [
                {"host": slave.host, "port": slave.port, "offset": slave.offset}
                for slave in record.slaves
            ],
            "masters": list(record.masters),
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConnectionView):
            return NotImplemented
        return self._record is other._record

    def __hash__(self) -> int:
        return id(self._record)

    def __repr__(self) -> str:
        return f"ConnectionView(id={self.id!r}, role={self.role.value!r}, ready={self.ready})"
