"""
SQLite storage: every collection lives in a single documents table,
one JSON body per row, ordered by insertion sequence.
"""

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, List, Optional

from .base import Record, Repository
from ..utils.exceptions import StorageError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class SqliteRepository(Repository):
    """Repository backed by a local SQLite database file"""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _get_conn(self) -> sqlite3.Connection:
        # Autocommit mode; transactions are opened explicitly in _transaction()
        conn = sqlite3.connect(str(self.db_path), timeout=30, isolation_level=None)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        """Create table if not exists."""
        conn = self._get_conn()
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS documents (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    collection TEXT NOT NULL,
                    id TEXT NOT NULL,
                    body TEXT NOT NULL,
                    UNIQUE (collection, id)
                )
            """)
        finally:
            conn.close()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        conn = self._get_conn()
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        except sqlite3.Error as e:
            raise StorageError(f"SQLite error on {self.db_path}: {e}")
        finally:
            conn.close()

    @staticmethod
    def _select(conn: sqlite3.Connection, collection: str, record_id: str) -> Optional[Record]:
        row = conn.execute(
            "SELECT body FROM documents WHERE collection = ? AND id = ?",
            (collection, record_id),
        ).fetchone()
        return json.loads(row["body"]) if row else None

    def list(self, collection: str) -> List[Record]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT body FROM documents WHERE collection = ? ORDER BY seq",
                (collection,),
            ).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"SQLite error on {self.db_path}: {e}")
        finally:
            conn.close()
        return [json.loads(row["body"]) for row in rows]

    def get(self, collection: str, record_id: str) -> Optional[Record]:
        conn = self._get_conn()
        try:
            return self._select(conn, collection, record_id)
        except sqlite3.Error as e:
            raise StorageError(f"SQLite error on {self.db_path}: {e}")
        finally:
            conn.close()

    def insert(self, collection: str, record: Record) -> Record:
        try:
            with self._transaction() as conn:
                conn.execute(
                    "INSERT INTO documents (collection, id, body) VALUES (?, ?, ?)",
                    (collection, record["id"], json.dumps(record, ensure_ascii=False)),
                )
        except StorageError as e:
            if "UNIQUE" in str(e):
                raise StorageError(f"Duplicate id '{record.get('id')}' in {collection}")
            raise
        return dict(record)

    def insert_unique(self, collection: str, record: Record, *fields: str) -> Optional[Record]:
        with self._transaction() as conn:
            rows = conn.execute(
                "SELECT body FROM documents WHERE collection = ?", (collection,)
            ).fetchall()
            for row in rows:
                existing = json.loads(row["body"])
                if all(existing.get(f) == record.get(f) for f in fields):
                    return None
            conn.execute(
                "INSERT INTO documents (collection, id, body) VALUES (?, ?, ?)",
                (collection, record["id"], json.dumps(record, ensure_ascii=False)),
            )
        return dict(record)

    def update(
        self,
        collection: str,
        record_id: str,
        mutate: Callable[[Record], Record],
    ) -> Optional[Record]:
        with self._transaction() as conn:
            current = self._select(conn, collection, record_id)
            if current is None:
                return None
            updated = dict(mutate(current))
            updated["id"] = record_id
            conn.execute(
                "UPDATE documents SET body = ? WHERE collection = ? AND id = ?",
                (json.dumps(updated, ensure_ascii=False), collection, record_id),
            )
        return updated

    def upsert(self, collection: str, record: Record) -> Record:
        with self._transaction() as conn:
            conn.execute(
                """
                INSERT INTO documents (collection, id, body) VALUES (?, ?, ?)
                ON CONFLICT (collection, id) DO UPDATE SET body = excluded.body
                """,
                (collection, record["id"], json.dumps(record, ensure_ascii=False)),
            )
        return dict(record)

    def delete(self, collection: str, record_id: str) -> Optional[Record]:
        with self._transaction() as conn:
            current = self._select(conn, collection, record_id)
            if current is None:
                return None
            conn.execute(
                "DELETE FROM documents WHERE collection = ? AND id = ?",
                (collection, record_id),
            )
        return current

    def delete_where(self, collection: str, **filters: Any) -> int:
        with self._transaction() as conn:
            rows = conn.execute(
                "SELECT id, body FROM documents WHERE collection = ?",
                (collection,),
            ).fetchall()
            doomed = [
                row["id"] for row in rows
                if all(json.loads(row["body"]).get(k) == v for k, v in filters.items())
            ]
            conn.executemany(
                "DELETE FROM documents WHERE collection = ? AND id = ?",
                [(collection, record_id) for record_id in doomed],
            )
        return len(doomed)
