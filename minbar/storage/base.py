"""
Storage repository interface.

Every record is a JSON-compatible dict with a string "id". Collections are
created on first write. Mutating operations are atomic per collection:
the JSON backend serializes them with a per-file lock, the SQLite backend
with a write transaction.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

Record = Dict[str, Any]


class Repository(ABC):
    """Collection-oriented document storage"""

    @abstractmethod
    def list(self, collection: str) -> List[Record]:
        """All records of a collection in insertion order"""

    @abstractmethod
    def get(self, collection: str, record_id: str) -> Optional[Record]:
        """Point lookup by id"""

    @abstractmethod
    def insert(self, collection: str, record: Record) -> Record:
        """Append a record; raises StorageError if the id already exists"""

    @abstractmethod
    def insert_unique(self, collection: str, record: Record, *fields: str) -> Optional[Record]:
        """
        Append a record unless another one has the same values for fields.

        The check and the write are one atomic step. Returns None, without
        writing, on a clash.
        """

    @abstractmethod
    def update(
        self,
        collection: str,
        record_id: str,
        mutate: Callable[[Record], Record],
    ) -> Optional[Record]:
        """
        Replace a record with mutate(current) atomically.

        Returns the new record, or None (without writing) if the id is unknown.
        """

    @abstractmethod
    def upsert(self, collection: str, record: Record) -> Record:
        """Insert or replace a record by id"""

    @abstractmethod
    def delete(self, collection: str, record_id: str) -> Optional[Record]:
        """Remove and return a record, or None if the id is unknown"""

    @abstractmethod
    def delete_where(self, collection: str, **filters: Any) -> int:
        """Remove every record whose fields equal the given filters"""

    def find(self, collection: str, **filters: Any) -> List[Record]:
        return [
            record
            for record in self.list(collection)
            if all(record.get(key) == value for key, value in filters.items())
        ]

    def find_one(self, collection: str, **filters: Any) -> Optional[Record]:
        return next(iter(self.find(collection, **filters)), None)

    def count(self, collection: str) -> int:
        return len(self.list(collection))

    def close(self) -> None:
        """Release backend resources (no-op by default)"""
