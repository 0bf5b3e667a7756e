"""Parsing of ROLE replies into role descriptors."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class Role(StrEnum):
    """Replication role reported by a node."""

    UNKNOWN = "unknown"
    MASTER = "master"
    SLAVE = "slave"
    SENTINEL = "sentinel"


@dataclass(frozen=True, slots=True)
class PeerAddress:
    """Host/port pair of a peer reported in a ROLE reply."""

    host: Any
    port: Any


@dataclass(frozen=True, slots=True)
class SlaveInfo:
    """A replica as listed by its master."""

    host: Any
    port: Any
    offset: Any

    @property
    def address(self) -> PeerAddress:
        return PeerAddress(self.host, self.port)


@dataclass(frozen=True, slots=True)
class RoleDescriptor:
    """Structured form of a ROLE reply.

    Only the fields that belong to ``role`` are populated:

    * master: ``offset`` and ``slaves``
    * slave: ``master``, ``status``, ``offset`` and ``ready``
    * sentinel: ``masters``
    """

    role: Role
    offset: int | None = None
    slaves: tuple[SlaveInfo, ...] | None = None
    master: PeerAddress | None = None
    status: str | None = None
    ready: bool | None = None
    masters: tuple[str, ...] | None = None

    @property
    def peers(self) -> list[PeerAddress]:
        """Addresses this node knows about that are discovery candidates."""
        peers = [slave.address for slave in self.slaves or ()]
        if self.master is not None:
            peers.append(self.master)
        return peers


def _text(value: Any) -> Any:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


def _number(value: Any) -> Any:
    value = _text(value)
    if isinstance(value, str) and value.lstrip("-").isdigit():
        return int(value)
    return value


def parse_role(response: Any) -> RoleDescriptor | None:
    """Translate a raw ROLE reply into a :class:`RoleDescriptor`.

    Returns None when the reply is empty or its leading tag is not one of
    master, slave or sentinel.
    """
    if not response:
        return None

    tag = _text(response[0])

    if tag == Role.MASTER:
        slaves = tuple(
            SlaveInfo(host=_text(entry[0]), port=_number(entry[1]), offset=_number(entry[2]))
            for entry in response[2] or []
        )
        return RoleDescriptor(role=Role.MASTER, offset=_number(response[1]), slaves=slaves)

    if tag == Role.SLAVE:
        status = _text(response[3])
        return RoleDescriptor(
            role=Role.SLAVE,
            master=PeerAddress(host=_text(response[1]), port=_number(response[2])),
            status=status,
            offset=_number(response[4]),
            ready=status == "connected",
        )

    if tag == Role.SENTINEL:
        return RoleDescriptor(
            role=Role.SENTINEL,
            masters=tuple(_text(name) for name in response[1] or []),
        )

    return None
