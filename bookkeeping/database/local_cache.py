# bookkeeping/database/local_cache.py
"""
Last-known snapshot of every collection, kept on disk for offline use.

One JSON file per collection. Timestamps are written the way a serialized
database timestamp looks ({"seconds": ..., "nanoseconds": ...}); readers
coerce them back with date_filter.coerce_datetime().
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping

from ..constants import COLLECTIONS

_log = logging.getLogger(__name__)


def _encode_default(o: Any) -> Any:
    if isinstance(o, date) and not isinstance(o, datetime):
        o = datetime.combine(o, time.min)
    if isinstance(o, datetime):
        ts = o.timestamp()
        seconds = int(ts // 1)
        return {"seconds": seconds, "nanoseconds": int(round((ts - seconds) * 1e9))}
    if isinstance(o, Mapping):
        return dict(o)
    raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")


class LocalSnapshotCache:
    """Key-value store keyed by collection name."""

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def path_for(self, collection: str) -> Path:
        if collection not in COLLECTIONS:
            raise ValueError(f"Unknown collection: {collection!r}")
        return self.directory / f"{collection}.json"

    def load(self, collection: str) -> List[Dict[str, Any]]:
        """Return the cached snapshot, or [] when nothing usable is on disk."""
        path = self.path_for(collection)
        if not path.exists():
            return []
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            _log.warning("LocalCache.load_failed collection=%s path=%s exc=%s", collection, path, exc)
            return []
        if not isinstance(data, list):
            _log.warning("LocalCache.bad_payload collection=%s type=%s", collection, type(data).__name__)
            return []
        return [r for r in data if isinstance(r, dict)]

    def save(self, collection: str, records: Iterable[Mapping[str, Any]]) -> None:
        """Atomically replace the cached snapshot for `collection`."""
        path = self.path_for(collection)
        self.directory.mkdir(parents=True, exist_ok=True)
        payload = json.dumps([dict(r) for r in records], default=_encode_default, ensure_ascii=False)
        fd, tmp = tempfile.mkstemp(prefix=f".{collection}.", suffix=".tmp", dir=str(self.directory))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp, path)
        except BaseException:
            try:
                os.unlink(tmp)
            except OSError:
                pass
            raise

    def load_all(self) -> Dict[str, List[Dict[str, Any]]]:
        return {name: self.load(name) for name in COLLECTIONS}
