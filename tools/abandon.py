"""Caller-side abandonment signal for long-running boundary calls."""

from __future__ import annotations

import threading

from logic.errors import OperationAbandoned


class AbandonSignal:
    """Set by a caller (closed dialog, dropped request) that no longer wants a result.

    Boundary calls already in flight are not interrupted. Stores check the
    signal before each record store write. Once the record store has confirmed
    a write the change is committed: it is applied locally and the operation
    completes even if the signal was set meanwhile. An image upload that
    finishes after abandonment is not followed by the record write, so the
    stored asset is orphaned.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def abandon(self) -> None:
        self._event.set()

    @property
    def abandoned(self) -> bool:
        return self._event.is_set()


def check_abandoned(signal: AbandonSignal | None, operation: str) -> None:
    """Raise :class:`OperationAbandoned` if ``signal`` has been set."""

    if signal is not None and signal.abandoned:
        raise OperationAbandoned(f"{operation} was cancelled; nothing was saved to the wardrobe")


__all__ = ["AbandonSignal", "check_abandoned"]
