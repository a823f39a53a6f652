# bookkeeping/database/data_cache.py
"""
Live, read-only view of every collection for the signed-in user.

One DataCache is created by the main window and handed to each module
(no module-level singleton). It keeps one store subscription per
collection, mirrors each snapshot to the LocalSnapshotCache and serves the
cached copy while offline.
"""
from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from PySide6.QtCore import QObject, Signal

from ..constants import COLLECTIONS
from .document_store import DocumentStore
from .local_cache import LocalSnapshotCache
from .snapshots import Snapshots

_log = logging.getLogger(__name__)

FrozenRecords = Tuple[Mapping[str, Any], ...]

NOT_LOGGED_IN = "Please log in to access data."
OFFLINE_NO_CACHE = "Offline: No cached data available"


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    return value


def freeze_records(records: Iterable[Mapping[str, Any]]) -> FrozenRecords:
    """Tuple of read-only mapping proxies; nested dicts/lists are frozen too."""
    return tuple(_freeze(r) for r in records)


class DataCache(QObject):
    collection_changed = Signal(str)
    status_changed = Signal()

    def __init__(self, store: DocumentStore, local_cache: LocalSnapshotCache, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.store = store
        self.local_cache = local_cache
        self.user_id: Optional[str] = None
        self.online = True
        self.loading = False
        self._data: Dict[str, FrozenRecords] = {name: () for name in COLLECTIONS}
        self._errors: Dict[str, str] = {}
        self._page_error: Optional[str] = None
        self._reported: set[str] = set()
        self._unsubscribers: Dict[str, Callable[[], None]] = {}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, user_id: Optional[str]) -> None:
        """Begin listening for `user_id`; None clears everything (logged out)."""
        self.stop()
        self.user_id = user_id
        self._data = {name: () for name in COLLECTIONS}
        self._errors.clear()

        if user_id is None:
            self.loading = False
            self._page_error = NOT_LOGGED_IN
            self._emit_all()
            return

        self._page_error = None
        if not self.online:
            self._load_offline()
            return

        self.loading = True
        self._reported.clear()
        self.status_changed.emit()
        for name in COLLECTIONS:
            self._unsubscribers[name] = self.store.subscribe(
                user_id,
                name,
                lambda records, n=name: self._on_snapshot(n, records),
                lambda exc, n=name: self._on_error(n, exc),
            )
        _log.info("DataCache.started user=%s collections=%d", user_id, len(COLLECTIONS))

    def stop(self) -> None:
        """Drop every listener; no snapshot callbacks arrive after this returns."""
        unsubs = list(self._unsubscribers.values())
        self._unsubscribers.clear()
        for unsub in unsubs:
            unsub()
        if unsubs:
            _log.info("DataCache.stopped user=%s", self.user_id)

    def set_online(self, online: bool) -> None:
        if online == self.online:
            return
        self.online = online
        _log.info("DataCache.connectivity online=%s", online)
        if online:
            if self.user_id is not None:
                self.start(self.user_id)
            else:
                self.status_changed.emit()
        else:
            self.stop()
            self._load_offline()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def snapshot(self, name: str) -> FrozenRecords:
        if name not in self._data:
            raise ValueError(f"Unknown collection: {name!r}")
        return self._data[name]

    def snapshots(self) -> Snapshots:
        return Snapshots.from_mapping(self._data)

    @property
    def error(self) -> Optional[str]:
        """Page-level message: the login/offline state first, then the first collection error."""
        if self._page_error:
            return self._page_error
        for name in COLLECTIONS:
            if name in self._errors:
                return self._errors[name]
        return None

    @property
    def errors(self) -> Dict[str, str]:
        return dict(self._errors)

    # ------------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------------

    def _on_snapshot(self, name: str, records) -> None:
        frozen = freeze_records(records)
        self._data[name] = frozen
        self._errors.pop(name, None)
        try:
            self.local_cache.save(name, records)
        except OSError as exc:
            _log.warning("DataCache.persist_failed collection=%s exc=%s", name, exc)
        self._mark_reported(name)
        self.collection_changed.emit(name)

    def _on_error(self, name: str, exc: Exception) -> None:
        _log.error("DataCache.subscription_failed collection=%s exc=%s", name, exc)
        self._errors[name] = f"Failed to load {name}"
        self._mark_reported(name)
        self.status_changed.emit()

    def _mark_reported(self, name: str) -> None:
        self._reported.add(name)
        if self.loading and self._reported.issuperset(COLLECTIONS):
            self.loading = False
            self.status_changed.emit()

    def _load_offline(self) -> None:
        cached = self.local_cache.load_all()
        self._data = {name: freeze_records(cached.get(name, [])) for name in COLLECTIONS}
        self.loading = False
        if self.user_id is None:
            self._page_error = NOT_LOGGED_IN
        else:
            self._page_error = None if self._data["sales"] else OFFLINE_NO_CACHE
        _log.info("DataCache.offline_loaded sales=%d", len(self._data["sales"]))
        self._emit_all()

    def _emit_all(self) -> None:
        for name in COLLECTIONS:
            self.collection_changed.emit(name)
        self.status_changed.emit()
