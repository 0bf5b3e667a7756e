"""Configuration for a topology manager."""

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Any
from urllib.parse import urlsplit

from redis.asyncio.connection import SSLConnection, parse_url

from fantastico.exceptions import ConfigurationError

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 6379


@dataclass(slots=True)
class TopologyConfig:
    """
    Settings for :class:`fantastico.TopologyManager`.

    Parameters
    ----------
    host, port:
        Seed node the topology is discovered from.
    options:
        Keyword arguments passed to every handle, e.g. ``password`` or
        ``socket_timeout`` for ``redis.asyncio.Redis``.
    check_interval:
        Seconds between two ROLE polls of a node, and seconds to wait
        before reconnecting a failed node.
    discover_masters:
        Also connect to the master a slave reports, so seeding a replica
        finds the whole topology.
    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    options: dict[str, Any] = field(default_factory=dict)
    check_interval: float = 1.0
    discover_masters: bool = True

    def __post_init__(self) -> None:
        if not self.host:
            raise ConfigurationError("host must not be empty")
        if not isinstance(self.port, int) or not 0 < self.port < 65536:
            raise ConfigurationError(f"port must be between 1 and 65535, got {self.port!r}")
        if self.check_interval <= 0:
            raise ConfigurationError(
                f"check_interval must be positive, got {self.check_interval!r}"
            )
        self.options = dict(self.options)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "TopologyConfig":
        """Build a config from a plain mapping such as parsed JSON/YAML."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(mapping) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**dict(mapping))

    @classmethod
    def from_url(cls, url: str, **kwargs: Any) -> "TopologyConfig":
        """Build a config from ``redis://[[user]:password@]host[:port][/db][?option=value]``.

        The URL is parsed by redis-py, so every query option it understands
        (``socket_timeout``, ``health_check_interval``, ...) ends up in
        ``options``. ``rediss://`` enables TLS. Extra keyword arguments are
        passed to the constructor.
        """
        parts = urlsplit(url)
        if parts.scheme not in ("redis", "rediss"):
            raise ConfigurationError(f"Unsupported URL scheme: {parts.scheme!r}")

        try:
            parsed = dict(parse_url(url))
        except ValueError as e:
            raise ConfigurationError(f"Invalid URL {url!r}: {e}") from e

        if parts.path.strip("/") and "db" not in parsed:
            raise ConfigurationError(f"Invalid database in {url!r}")

        host = parsed.pop("host", DEFAULT_HOST)
        port = parsed.pop("port", DEFAULT_PORT)
        if parsed.pop("connection_class", None) is SSLConnection:
            parsed["ssl"] = True

        options: dict[str, Any] = dict(kwargs.pop("options", {}))
        options.update(parsed)
        return cls(host=host, port=port, options=options, **kwargs)
