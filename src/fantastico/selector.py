"""Round-robin selection of ready connections."""

import logging

from fantastico.record import ConnectionView
from fantastico.registry import Registry
from fantastico.role import Role

_LOGGER = logging.getLogger(__name__)


class Selector:
    """Picks ready connections of a role, rotating through them in order."""

    def __init__(self, registry: Registry) -> None:
        self._registry = registry
        self._cursors: dict[Role, int] = dict.fromkeys(Role, 0)

    def find_next(self, role: Role, id: str | None = None) -> ConnectionView | None:
        """Get the next ready connection with ``role``.

        With ``id`` only that connection is considered and the rotation is
        left untouched. Returns None if nothing matches.
        """
        candidates = self._registry.find(role, id)

        if not candidates:
            _LOGGER.debug("No ready %s connection (id=%s)", role, id)
            return None

        if id is not None:
            return ConnectionView(candidates[0])

        cursor = self._cursors[role]
        if cursor >= len(candidates):
            cursor = 0

        self._cursors[role] = (cursor + 1) % len(candidates)
        return ConnectionView(candidates[cursor])
