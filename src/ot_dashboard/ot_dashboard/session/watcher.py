"""Storage events for the shared session file.

Another dashboard process writing the same ``SESSION_STORE_PATH`` shows up here
as a filesystem event. The watcher diffs the file against its last snapshot
and dispatches one storage event per changed key, so the key filter in
:class:`StorageEventSource` still applies.
"""
from __future__ import annotations

import logging
import os
import threading
from typing import Optional

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from .sources import StorageEventSource
from .store import JsonFileSessionStore

logger = logging.getLogger(__name__)

# open/close events are skipped: reading the file to diff it raises them too
WRITE_EVENTS = frozenset({EVENT_TYPE_CREATED, EVENT_TYPE_DELETED, EVENT_TYPE_MODIFIED, EVENT_TYPE_MOVED})


def changed_keys(previous: dict[str, str], current: dict[str, str]) -> list[Optional[str]]:
    """Keys whose value differs; ``[None]`` when the store was emptied."""
    if previous and not current:
        return [None]
    return sorted(k for k in set(previous) | set(current) if previous.get(k) != current.get(k))


class SessionFileWatcher(FileSystemEventHandler):
    def __init__(self, store: JsonFileSessionStore, events: StorageEventSource):
        super().__init__()
        self._store = store
        self._events = events
        self._target = os.path.abspath(str(store.path))
        self._snapshot_lock = threading.Lock()
        self._last = store.snapshot()
        self._observer: Optional[Observer] = None

    def start(self) -> None:
        if self._observer is not None:
            return
        observer = Observer()
        observer.schedule(self, os.path.dirname(self._target), recursive=False)
        observer.daemon = True
        observer.start()
        self._observer = observer
        logger.debug("Watching %s for session changes", self._target)

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5)
        self._observer = None

    def _touches_store(self, event: FileSystemEvent) -> bool:
        paths = [event.src_path, getattr(event, "dest_path", "")]
        return any(p and os.path.abspath(os.fsdecode(p)) == self._target for p in paths)

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in WRITE_EVENTS or not self._touches_store(event):
            return
        self.refresh()

    def refresh(self) -> list[Optional[str]]:
        """Dispatch storage events for whatever changed since the last look."""
        with self._snapshot_lock:
            current = self._store.snapshot()
            previous, self._last = self._last, current
        changed = changed_keys(previous, current)
        for key in changed:
            self._events.dispatch(key)
        return changed
