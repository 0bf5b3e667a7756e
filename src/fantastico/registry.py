"""Registry of known connections."""

from collections.abc import Iterator

from fantastico.record import Address, ConnectionRecord
from fantastico.role import Role


class Registry:
    """Insertion-ordered collection of connection records, one per address."""

    def __init__(self) -> None:
        self._records: dict[str, ConnectionRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ConnectionRecord]:
        return iter(list(self._records.values()))

    def __contains__(self, item: ConnectionRecord | Address | str) -> bool:
        if isinstance(item, ConnectionRecord):
            return self._records.get(item.id) is item
        key = item.id if isinstance(item, Address) else item
        return key in self._records

    def get(self, id: str) -> ConnectionRecord | None:
        """Get the record with the given id."""
        return self._records.get(id)

    def add(self, record: ConnectionRecord) -> bool:
        """Append a record unless its address is already known.

        Returns True if the record was added.
        """
        if record.id in self._records:
            return False
        self._records[record.id] = record
        return True

    def remove(self, record: ConnectionRecord) -> bool:
        """Remove a record. A different record for the same address is kept."""
        if self._records.get(record.id) is not record:
            return False
        del self._records[record.id]
        return True

    def find(self, role: Role, id: str | None = None, *, ready: bool = True) -> list[ConnectionRecord]:
        """List records of a role in insertion order.

        Args:
            role: Role to match
            id: Only match the record with this id
            ready: Only match records that are ready
        """
        return [
            record
            for record in self._records.values()
            if record.role == role
            and (id is None or record.id == id)
            and (record.ready or not ready)
        ]

    def clear(self) -> list[ConnectionRecord]:
        """Remove and return all records."""
        records = list(self._records.values())
        self._records.clear()
        return records
