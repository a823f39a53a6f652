# bookkeeping/database/document_store.py
"""
Per-user document store with live snapshot listeners.

Documents are JSON objects kept in the `documents` table (see schema.py) and
addressed as users/{user_id}/{collection}/{doc_id}. Every write re-delivers
the full snapshot of the touched collection to its subscribers, which is the
contract the DataCache relies on.

Datetime fields round-trip as `datetime` objects; on disk they are tagged as
{"__ts__": "<iso>"} so they can be told apart from plain strings.
"""
from __future__ import annotations

import copy
import json
import logging
import sqlite3
import threading
import uuid
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from ..constants import COLLECTIONS

_log = logging.getLogger(__name__)

Record = Dict[str, Any]
SnapshotCallback = Callable[[List[Record]], None]
ErrorCallback = Callable[[Exception], None]
Unsubscribe = Callable[[], None]

_TS_TAG = "__ts__"


class DocumentNotFound(KeyError):
    """Raised when updating a document that does not exist."""


def collection_path(user_id: str, collection: str) -> str:
    return f"users/{user_id}/{collection}"


# ------------------------------ JSON codec ----------------------------------

def _encode_default(o: Any) -> Any:
    if isinstance(o, datetime):
        return {_TS_TAG: o.isoformat()}
    if isinstance(o, date):
        return {_TS_TAG: datetime.combine(o, time.min).isoformat()}
    raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")


def _decode_hook(obj: Dict[str, Any]) -> Any:
    if len(obj) == 1 and _TS_TAG in obj:
        try:
            return datetime.fromisoformat(obj[_TS_TAG])
        except (TypeError, ValueError):
            return obj
    return obj


def dumps(fields: Mapping[str, Any]) -> str:
    return json.dumps(dict(fields), default=_encode_default, ensure_ascii=False)


def loads(text: str) -> Record:
    return json.loads(text, object_hook=_decode_hook)


# ------------------------------ Store ---------------------------------------

@dataclass(eq=False)
class _Listener:
    on_snapshot: SnapshotCallback
    on_error: Optional[ErrorCallback]
    active: bool = True


class DocumentStore:
    """
    SQLite-backed implementation of the DataStore collaborator.

    The store owns no cached state; each snapshot is read fresh from SQLite,
    so callers always receive new dict objects they may not write back through.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self.conn.row_factory = sqlite3.Row
        self._listeners: Dict[Tuple[str, str], List[_Listener]] = {}
        self._lock = threading.RLock()

    # ---------------------------------------------------------------------
    # Reads
    # ---------------------------------------------------------------------

    def list(self, user_id: str, collection: str) -> List[Record]:
        self._check(collection)
        rows = self.conn.execute(
            "SELECT doc_id, data FROM documents WHERE user_id=? AND collection=? ORDER BY rowid",
            (user_id, collection),
        ).fetchall()
        return [self._row_to_record(r) for r in rows]

    def get(self, user_id: str, collection: str, doc_id: str) -> Optional[Record]:
        self._check(collection)
        row = self.conn.execute(
            "SELECT doc_id, data FROM documents WHERE user_id=? AND collection=? AND doc_id=?",
            (user_id, collection, doc_id),
        ).fetchone()
        return None if row is None else self._row_to_record(row)

    def query(self, user_id: str, collection: str, field: str, value: Any) -> List[Record]:
        """Equality query on a top-level field (e.g. debts where saleId == X)."""
        self._check(collection)
        rows = self.conn.execute(
            "SELECT doc_id, data FROM documents "
            "WHERE user_id=? AND collection=? AND json_extract(data, ?) = ? ORDER BY rowid",
            (user_id, collection, f"$.{field}", value),
        ).fetchall()
        return [self._row_to_record(r) for r in rows]

    # ---------------------------------------------------------------------
    # Writes
    # ---------------------------------------------------------------------

    def add(self, user_id: str, collection: str, fields: Mapping[str, Any]) -> str:
        doc_id = uuid.uuid4().hex
        self.set(user_id, collection, doc_id, fields)
        return doc_id

    def set(self, user_id: str, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None:
        self._check(collection)
        payload = {k: v for k, v in fields.items() if k != "id"}
        self.conn.execute(
            """
            INSERT INTO documents(user_id, collection, doc_id, data, updated_at)
            VALUES (?, ?, ?, ?, CURRENT_TIMESTAMP)
            ON CONFLICT(user_id, collection, doc_id)
            DO UPDATE SET data=excluded.data, updated_at=CURRENT_TIMESTAMP
            """,
            (user_id, collection, doc_id, dumps(payload)),
        )
        self.conn.commit()
        self._notify(user_id, collection)

    def update(self, user_id: str, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None:
        """Shallow merge `fields` into an existing document."""
        current = self.get(user_id, collection, doc_id)
        if current is None:
            raise DocumentNotFound(f"{collection_path(user_id, collection)}/{doc_id}")
        current.update({k: v for k, v in fields.items() if k != "id"})
        self.set(user_id, collection, doc_id, current)

    def delete(self, user_id: str, collection: str, doc_id: str) -> None:
        self._check(collection)
        cur = self.conn.execute(
            "DELETE FROM documents WHERE user_id=? AND collection=? AND doc_id=?",
            (user_id, collection, doc_id),
        )
        self.conn.commit()
        if cur.rowcount:
            self._notify(user_id, collection)

    # ---------------------------------------------------------------------
    # Live snapshots
    # ---------------------------------------------------------------------

    def subscribe(
        self,
        user_id: str,
        collection: str,
        on_snapshot: SnapshotCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> Unsubscribe:
        """
        Deliver the current snapshot now and after every write to
        users/{user_id}/{collection}. Returns an idempotent unsubscribe callable.
        """
        self._check(collection)
        listener = _Listener(on_snapshot, on_error)
        key = (user_id, collection)
        with self._lock:
            self._listeners.setdefault(key, []).append(listener)

        def unsubscribe() -> None:
            with self._lock:
                listener.active = False
                bucket = self._listeners.get(key, [])
                if listener in bucket:
                    bucket.remove(listener)

        self._deliver(key, [listener])
        return unsubscribe

    def listener_count(self, user_id: str, collection: str) -> int:
        with self._lock:
            return len(self._listeners.get((user_id, collection), []))

    def _notify(self, user_id: str, collection: str) -> None:
        key = (user_id, collection)
        with self._lock:
            listeners = list(self._listeners.get(key, []))
        if listeners:
            self._deliver(key, listeners)

    def _deliver(self, key: Tuple[str, str], listeners: List[_Listener]) -> None:
        user_id, collection = key
        try:
            records = self.list(user_id, collection)
        except sqlite3.Error as exc:
            _log.error("Store.snapshot_failed path=%s exc=%s", collection_path(user_id, collection), exc)
            for listener in listeners:
                if listener.active and listener.on_error is not None:
                    listener.on_error(exc)
            return

        for listener in listeners:
            if not listener.active:
                continue
            try:
                # each listener gets its own copies
                listener.on_snapshot(copy.deepcopy(records))
            except Exception:
                _log.exception("Store.listener_failed path=%s", collection_path(user_id, collection))

    # ---------------------------------------------------------------------

    @staticmethod
    def _check(collection: str) -> None:
        if collection not in COLLECTIONS:
            raise ValueError(f"Unknown collection: {collection!r}")

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> Record:
        data = loads(row["data"])
        data["id"] = row["doc_id"]
        return data
