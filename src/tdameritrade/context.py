"""Caller-owned cancellation and deadline handle.

A `Context` is passed into every network-facing call. Cancelling it (or
letting its deadline pass) makes the pending call return `ContextCancelled`
/ `DeadlineExceeded` promptly instead of waiting for the HTTP round-trip.

Children derived with `with_cancel` / `with_timeout` are cancelled when
their parent is, and never outlive the parent's deadline.

Typical usage
-------------
    with Context().with_timeout(5.0) as ctx:
        chains, resp = service.get_chains(ctx, {"symbol": "AAPL"})
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from .errors import ContextCancelled, DeadlineExceeded


class Context:
    """Cancellation flag plus optional monotonic deadline."""

    def __init__(
        self,
        *,
        parent: Context | None = None,
        deadline: float | None = None,
    ) -> None:
        if parent is not None and parent.deadline is not None:
            if deadline is None or parent.deadline < deadline:
                deadline = parent.deadline

        self._deadline = deadline
        self._lock = threading.Lock()
        self._event = threading.Event()
        self._callbacks: list[Callable[[], None]] = []
        self._parent = parent

        if parent is not None:
            parent.add_done_callback(self.cancel)

    @property
    def deadline(self) -> float | None:
        """Deadline on the `time.monotonic()` clock, if any."""
        return self._deadline

    def with_cancel(self) -> Context:
        return Context(parent=self)

    def with_timeout(self, seconds: float) -> Context:
        return Context(parent=self, deadline=time.monotonic() + float(seconds))

    def cancel(self) -> None:
        """Cancel this context and every child. Idempotent."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()

        if self._parent is not None:
            self._parent.remove_done_callback(self.cancel)

        for cb in callbacks:
            cb()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def remaining(self) -> float | None:
        """Seconds left until the deadline (never negative), or `None`."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def err(self) -> ContextCancelled | None:
        """Return the cancellation error, or `None` while the context is live."""
        if self._event.is_set():
            return ContextCancelled("context cancelled")
        if self._deadline is not None and time.monotonic() >= self._deadline:
            return DeadlineExceeded("context deadline exceeded")
        return None

    def done(self) -> bool:
        return self.err() is not None

    def raise_if_done(self) -> None:
        err = self.err()
        if err is not None:
            raise err

    def add_done_callback(self, fn: Callable[[], None]) -> None:
        """Run `fn` on cancellation; runs immediately if already cancelled.

        Deadline expiry does not fire callbacks; waiters use `remaining()`.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(fn)
                return
        fn()

    def remove_done_callback(self, fn: Callable[[], None]) -> None:
        with self._lock:
            try:
                self._callbacks.remove(fn)
            except ValueError:
                pass

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled, the deadline passes or `timeout` elapses.

        Returns True if the context is done.
        """
        end = None if timeout is None else time.monotonic() + timeout
        while not self.done():
            waits = [w for w in (self.remaining(), end) if w is not None]
            if end is not None:
                left = end - time.monotonic()
                if left <= 0:
                    return False
                waits[-1] = left
            self._event.wait(min(waits) if waits else None)
        return True

    def __enter__(self) -> Context:
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.cancel()
        return False

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "live"
        return f"Context({state}, remaining={self.remaining()})"
