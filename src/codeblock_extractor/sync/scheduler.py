"""Debounced per-key scheduling for keeping generated files in sync.

Each key (typically a source document URI) owns at most one pending timer.
Scheduling again for the same key cancels the pending timer and starts a new
one, so only the latest payload is delivered once edits settle.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable
import logging
import threading
from typing import Generic, TypeVar


__all__ = ["DEFAULT_DEBOUNCE_DELAY", "DebouncedScheduler"]

_log = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_DELAY = 0.3

T = TypeVar("T")


class DebouncedScheduler(Generic[T]):
    """Deliver ``callback(key, payload)`` after ``delay`` seconds of quiet per key."""

    def __init__(
        self,
        callback: Callable[[Hashable, T], None],
        *,
        delay: float = DEFAULT_DEBOUNCE_DELAY,
        timer_factory: Callable[[float, Callable[[], None]], threading.Timer] | None = None,
    ) -> None:
        self._callback = callback
        self._delay = delay
        self._timer_factory = timer_factory or threading.Timer
        self._pending: dict[Hashable, tuple[threading.Timer, T]] = {}
        self._lock = threading.Lock()
        self._disposed = False

    @property
    def pending_keys(self) -> list[Hashable]:
        with self._lock:
            return list(self._pending)

    def schedule(self, key: Hashable, payload: T) -> None:
        """Schedule delivery of ``payload``, superseding any pending call for ``key``."""
        with self._lock:
            if self._disposed:
                raise RuntimeError("Scheduler has been disposed.")
            existing = self._pending.pop(key, None)
            if existing is not None:
                existing[0].cancel()
            timer = self._timer_factory(self._delay, lambda: self._fire(key, timer))
            timer.daemon = True
            self._pending[key] = (timer, payload)
        timer.start()

    def cancel(self, key: Hashable) -> bool:
        """Drop the pending call for ``key``; return whether one existed."""
        with self._lock:
            existing = self._pending.pop(key, None)
        if existing is None:
            return False
        existing[0].cancel()
        return True

    def flush(self, key: Hashable) -> bool:
        """Run the pending call for ``key`` immediately; return whether one ran."""
        with self._lock:
            existing = self._pending.pop(key, None)
        if existing is None:
            return False
        timer, payload = existing
        timer.cancel()
        self._deliver(key, payload)
        return True

    def dispose(self) -> None:
        """Cancel every pending call and refuse further scheduling."""
        with self._lock:
            pending = list(self._pending.values())
            self._pending.clear()
            self._disposed = True
        for timer, _payload in pending:
            timer.cancel()

    def _fire(self, key: Hashable, timer: threading.Timer) -> None:
        with self._lock:
            existing = self._pending.get(key)
            # A superseded timer may still fire if it raced with its cancellation.
            if existing is None or existing[0] is not timer:
                return
            del self._pending[key]
        self._deliver(key, existing[1])

    def _deliver(self, key: Hashable, payload: T) -> None:
        try:
            self._callback(key, payload)
        except Exception:
            _log.exception("Scheduled update for %s failed", key)
