"""Single owner of the live snapshot, plus debounced persistence."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
import threading
from typing import Any, Callable

from .reducers import next_id
from .schema import Snapshot

logger = logging.getLogger(__name__)

DEFAULT_SAVE_DELAY: float = 1.5


def save_snapshot(path: str | Path, snapshot: Snapshot) -> None:
    """Write the snapshot as JSON, replacing the target only once fully written."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = target.with_name(f"{target.name}.tmp")
    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump(snapshot.to_dict(), f, allow_nan=False, indent=2)
    os.replace(tmp_path, target)


class DebouncedSaver:
    """Calls ``save`` with the latest snapshot once no change arrived for ``delay`` seconds."""

    def __init__(self, save: Callable[[Snapshot], None], delay: float = DEFAULT_SAVE_DELAY) -> None:
        self._save = save
        self._delay = delay
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._pending: Snapshot | None = None

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def schedule(self, snapshot: Snapshot) -> None:
        with self._lock:
            self._pending = snapshot
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self._delay, self.flush)
            self._timer.daemon = True
            self._timer.start()

    def flush(self) -> None:
        with self._lock:
            snapshot = self._pending
            self._pending = None
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        if snapshot is not None:
            logger.debug("saving snapshot")
            self._save(snapshot)

    def cancel(self) -> None:
        with self._lock:
            self._pending = None
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None


class Store:
    """Holds the current snapshot and applies reducers to it.

    Listeners are called with each new snapshot after a dispatch. Ids handed
    out by ``new_id`` are never reissued, even after the entity is removed.
    """

    def __init__(self, snapshot: Snapshot) -> None:
        self._snapshot = snapshot
        self._lock = threading.RLock()
        self._last_id = next_id(snapshot) - 1
        self._listeners: list[Callable[[Snapshot], None]] = []

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    def subscribe(self, listener: Callable[[Snapshot], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def new_id(self) -> int:
        with self._lock:
            self._last_id = max(self._last_id + 1, next_id(self._snapshot))
            return self._last_id

    def dispatch(self, reducer: Callable[..., Snapshot], *args: Any, **kwargs: Any) -> Snapshot:
        with self._lock:
            updated = reducer(self._snapshot, *args, **kwargs)
            if updated is self._snapshot:
                return updated
            self._snapshot = updated
            listeners = list(self._listeners)
        for listener in listeners:
            listener(updated)
        return updated
