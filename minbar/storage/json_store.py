"""
JSON-file storage: one file per collection holding a JSON array.

Read-modify-write cycles hold a per-file lock and files are replaced
atomically (temp file + move), so concurrent requests cannot drop each
other's writes.
"""

import json
import shutil
import tempfile
import threading
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional

from .base import Record, Repository
from ..utils.exceptions import StorageError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class JsonFileRepository(Repository):
    """Repository backed by <data_dir>/<collection>.json files"""

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._locks: Dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    def path_for(self, collection: str) -> Path:
        return self.data_dir / f"{collection}.json"

    def _lock(self, collection: str) -> threading.RLock:
        with self._locks_guard:
            lock = self._locks.get(collection)
            if lock is None:
                lock = threading.RLock()
                self._locks[collection] = lock
            return lock

    @contextmanager
    def _locked(self, collection: str) -> Iterator[List[Record]]:
        with self._lock(collection):
            yield self._read(collection)

    def _read(self, collection: str) -> List[Record]:
        """Load a collection, back-filling ids on legacy records"""
        path = self.path_for(collection)
        if not path.exists():
            return []

        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}")
        if not text.strip():
            return []

        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise StorageError(f"Failed to parse {path}: {e}")

        records = self._normalize(collection, raw)

        missing_ids = [r for r in records if not r.get("id")]
        if missing_ids:
            for record in missing_ids:
                record["id"] = str(uuid.uuid4())
            logger.info("Assigned ids to legacy records", collection=collection, count=len(missing_ids))
            self._write(collection, records)

        return records

    @staticmethod
    def _normalize(collection: str, raw: Any) -> List[Record]:
        """
        Accept the array layout plus three older ones:
        {"<collection>": [...]}, {"<id>": {...}, ...} and a single flat
        record such as {"password": "..."}.
        """
        if isinstance(raw, list):
            return [dict(r) for r in raw if isinstance(r, dict)]
        if isinstance(raw, dict):
            wrapped = raw.get(collection)
            if isinstance(wrapped, list):
                return [dict(r) for r in wrapped if isinstance(r, dict)]
            nested = [isinstance(value, dict) for value in raw.values()]
            if all(nested):
                return [{"id": key, **value} for key, value in raw.items()]
            if not any(nested):
                return [dict(raw)]
        raise StorageError(f"Unexpected layout for collection '{collection}'")

    def _write(self, collection: str, records: List[Record]) -> None:
        """Write JSON file atomically"""
        path = self.path_for(collection)
        with tempfile.NamedTemporaryFile(
            mode="w", dir=str(self.data_dir), delete=False, encoding="utf-8", suffix=".tmp"
        ) as tf:
            json.dump(records, tf, indent=2, ensure_ascii=False)
            temp_path = Path(tf.name)

        try:
            shutil.move(str(temp_path), str(path))
        except Exception as e:
            if temp_path.exists():
                temp_path.unlink()
            raise StorageError(f"Failed to save {path}: {e}")

    def list(self, collection: str) -> List[Record]:
        with self._locked(collection) as records:
            return records

    def get(self, collection: str, record_id: str) -> Optional[Record]:
        with self._locked(collection) as records:
            return next((r for r in records if r.get("id") == record_id), None)

    def insert(self, collection: str, record: Record) -> Record:
        with self._locked(collection) as records:
            if any(r.get("id") == record.get("id") for r in records):
                raise StorageError(f"Duplicate id '{record.get('id')}' in {collection}")
            records.append(dict(record))
            self._write(collection, records)
            return dict(record)

    def insert_unique(self, collection: str, record: Record, *fields: str) -> Optional[Record]:
        with self._locked(collection) as records:
            if any(all(r.get(f) == record.get(f) for f in fields) for r in records):
                return None
            return self.insert(collection, record)

    def update(
        self,
        collection: str,
        record_id: str,
        mutate: Callable[[Record], Record],
    ) -> Optional[Record]:
        with self._locked(collection) as records:
            for i, record in enumerate(records):
                if record.get("id") == record_id:
                    updated = dict(mutate(dict(record)))
                    updated["id"] = record_id
                    records[i] = updated
                    self._write(collection, records)
                    return dict(updated)
            return None

    def upsert(self, collection: str, record: Record) -> Record:
        with self._locked(collection) as records:
            for i, existing in enumerate(records):
                if existing.get("id") == record.get("id"):
                    records[i] = dict(record)
                    break
            else:
                records.append(dict(record))
            self._write(collection, records)
            return dict(record)

    def delete(self, collection: str, record_id: str) -> Optional[Record]:
        with self._locked(collection) as records:
            for i, record in enumerate(records):
                if record.get("id") == record_id:
                    removed = records.pop(i)
                    self._write(collection, records)
                    return removed
            return None

    def delete_where(self, collection: str, **filters: Any) -> int:
        with self._locked(collection) as records:
            kept = [
                r for r in records
                if not all(r.get(key) == value for key, value in filters.items())
            ]
            removed = len(records) - len(kept)
            if removed:
                self._write(collection, kept)
            return removed
