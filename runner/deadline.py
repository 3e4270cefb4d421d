"""
Deadline - caller-supplied cancellation and timeout token.

Threaded through every database call. A deadline expires when its
timeout elapses or when cancel() is called from any thread; database
calls guarded by it abort and raise DeadlineExceeded / OperationCancelled.
"""

import threading
import time
from typing import Callable, List, Optional

from ..protocol.errors import DeadlineExceeded, OperationCancelled


class Deadline:
    """
    Cancellation token with an optional timeout.

    Usage:
        deadline = Deadline.after(10)
        rows = handle.query("SELECT 1", deadline=deadline)

        # from another thread
        deadline.cancel()
    """

    def __init__(self, timeout: Optional[float] = None):
        """
        Args:
            timeout: Seconds from now until expiry; None never expires
        """
        self._expires_at = time.monotonic() + timeout if timeout is not None else None
        self._cancelled = threading.Event()
        self._callbacks: List[Callable[[], None]] = []
        self._lock = threading.Lock()

    @classmethod
    def after(cls, seconds: float) -> "Deadline":
        return cls(timeout=seconds)

    @classmethod
    def none(cls) -> "Deadline":
        """A deadline that only expires through cancel()."""
        return cls()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        """True once the timeout has elapsed (cancellation not included)."""
        return self._expires_at is not None and time.monotonic() >= self._expires_at

    def remaining(self) -> Optional[float]:
        """Seconds left, 0.0 once expired, None without a timeout."""
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())

    def cancel(self) -> None:
        """Cancel the deadline and fire registered callbacks once."""
        with self._lock:
            if self._cancelled.is_set():
                return
            self._cancelled.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()

        for callback in callbacks:
            callback()

    def on_cancel(self, callback: Callable[[], None]) -> Callable[[], None]:
        """
        Register a callback fired by cancel().

        Fires immediately if the deadline is already cancelled.

        Returns:
            Callable that unregisters the callback
        """
        with self._lock:
            if not self._cancelled.is_set():
                self._callbacks.append(callback)
                return lambda: self._unregister(callback)

        callback()
        return lambda: None

    def _unregister(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def error(self) -> Optional[OperationCancelled]:
        """The exception describing why the deadline is done, if it is."""
        if self.cancelled:
            return OperationCancelled("operation cancelled")
        if self.expired:
            return DeadlineExceeded("deadline exceeded")
        return None

    def check(self) -> None:
        """Raise if the deadline is cancelled or expired."""
        error = self.error()
        if error is not None:
            raise error

    def __repr__(self) -> str:
        remaining = self.remaining()
        state = "cancelled" if self.cancelled else (
            "no timeout" if remaining is None else f"{remaining:.3f}s left"
        )
        return f"Deadline({state})"
