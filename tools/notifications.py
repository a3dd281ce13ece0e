"""Notification boundary: fire-and-forget user-facing reports."""

from __future__ import annotations

import itertools
import logging
import time
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import asdict, dataclass, field
from typing import Any, Deque, Dict, List

from logic.errors import InventoryError
from wardrobe_app.logging_config import get_logger, log_event

LOGGER = get_logger(__name__)

SEVERITIES = ("info", "error")
_NOTICE_IDS = itertools.count(1)


@dataclass
class Notice:
    """One toast-style message."""

    severity: str
    title: str
    message: str
    id: int = field(default_factory=lambda: next(_NOTICE_IDS))
    created_at: float = field(default_factory=time.time)


class Notifier(ABC):
    """Receives reports; return values are never consumed."""

    @abstractmethod
    def report(self, severity: str, title: str, message: str) -> None:
        """Present a message to the user."""

    def report_error(self, error: InventoryError) -> None:
        self.report("error", error.title, error.message)


class LoggingNotifier(Notifier):
    """Writes every report to the structured log."""

    def report(self, severity: str, title: str, message: str) -> None:
        level = logging.ERROR if severity == "error" else logging.INFO
        log_event(LOGGER, level, "user_notification", severity=severity, title=title, detail=message)


class CollectingNotifier(LoggingNotifier):
    """Keeps the most recent reports so a client can poll and display them.

    Newest notices come first; only ``limit`` are retained, matching a toast
    area that shows one message at a time by default.
    """

    def __init__(self, limit: int = 1) -> None:
        self.limit = max(1, limit)
        self._notices: Deque[Notice] = deque(maxlen=self.limit)

    def report(self, severity: str, title: str, message: str) -> None:
        if severity not in SEVERITIES:
            severity = "info"
        super().report(severity, title, message)
        self._notices.appendleft(Notice(severity=severity, title=title, message=message))

    def notices(self) -> List[Dict[str, Any]]:
        return [asdict(notice) for notice in self._notices]

    def dismiss(self, notice_id: int | None = None) -> None:
        """Drop one notice, or all of them when ``notice_id`` is omitted."""

        if notice_id is None:
            self._notices.clear()
            return
        remaining = [notice for notice in self._notices if notice.id != notice_id]
        self._notices.clear()
        self._notices.extend(remaining)


__all__ = ["CollectingNotifier", "LoggingNotifier", "Notice", "Notifier"]
