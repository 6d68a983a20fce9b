"""Caller-supplied cancellation and deadline token."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Callable

from .exceptions import RequestCancelledError


@dataclass(frozen=True)
class RequestContext:
    """Cancellation signal plus optional deadline, safe to share across threads.

    `deadline` is a `time.monotonic()` timestamp.
    """

    deadline: float | None = None
    _cancelled: threading.Event = field(default_factory=threading.Event, repr=False, compare=False)
    _callbacks: list[Callable[[], None]] = field(default_factory=list, repr=False, compare=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @classmethod
    def background(cls) -> "RequestContext":
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float) -> "RequestContext":
        if seconds <= 0:
            raise ValueError("timeout must be greater than 0")
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self) -> None:
        with self._lock:
            if self._cancelled.is_set():
                return
            self._cancelled.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        for callback in callbacks:
            callback()

    def on_cancel(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Run `callback` once on cancellation; returns a function that unregisters it.

        The callback runs immediately when the context is already cancelled.
        """
        with self._lock:
            if not self._cancelled.is_set():
                self._callbacks.append(callback)
                return lambda: self._discard(callback)
        callback()
        return lambda: None

    def _discard(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> float | None:
        if self.deadline is None:
            return None
        return self.deadline - time.monotonic()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise RequestCancelledError("request context was cancelled")
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            raise RequestCancelledError("request context deadline exceeded")

    def timeout_for(self, default: float) -> float:
        """Per-request timeout: the time left until the deadline, capped at `default`."""
        remaining = self.remaining()
        if remaining is None:
            return default
        return max(0.0, min(default, remaining))
