"""Cooperative cancellation shared by every suspension point of a run."""

from __future__ import annotations

import threading

from .errors import OperationCancelled


class CancellationToken:
    """Thread-safe flag checked before network calls and between streamed tokens."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._reason: str | None = None

    def cancel(self, reason: str | None = None) -> None:
        if not self._event.is_set():
            self._reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or ``timeout`` elapses; returns whether cancelled."""
        return self._event.wait(timeout)

    @property
    def reason(self) -> str | None:
        return self._reason

    def raise_if_cancelled(self, operation: str | None = None) -> None:
        if not self._event.is_set():
            return
        detail = f" during {operation}" if operation else ""
        reason = f": {self._reason}" if self._reason else ""
        raise OperationCancelled(f"Operation cancelled{detail}{reason}")


def ensure_token(token: CancellationToken | None) -> CancellationToken:
    """Return the given token or a fresh one that is never cancelled."""
    return token if token is not None else CancellationToken()


__all__ = ["CancellationToken", "ensure_token"]
