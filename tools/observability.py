"""Observability helpers for instrumenting inventory operations."""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Any, Callable, TypeVar

from logic.errors import InventoryError
from wardrobe_app.logging_config import ensure_correlation_id, get_logger, log_event

LOGGER = get_logger(__name__)
F = TypeVar("F", bound=Callable[..., Any])


def instrument_operation(operation: str) -> Callable[[F], F]:
    """Wrap a store method to emit structured logs and report failures.

    The wrapped method's owner must expose a ``notifier``. Inventory errors
    are reported through it once, marked as reported, and then re-raised so
    callers can still react to the specific error kind.
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
            correlation_id = ensure_correlation_id()
            start = time.perf_counter()
            log_event(
                LOGGER,
                logging.INFO,
                "operation_started",
                operation=operation,
                correlation_id=correlation_id,
            )
            try:
                result = func(self, *args, **kwargs)
            except InventoryError as exc:
                duration_ms = round((time.perf_counter() - start) * 1000, 2)
                log_event(
                    LOGGER,
                    logging.WARNING,
                    "operation_failed",
                    operation=operation,
                    correlation_id=correlation_id,
                    duration_ms=duration_ms,
                    error_kind=exc.kind,
                )
                notifier = getattr(self, "notifier", None)
                if notifier is not None and not exc.reported:
                    notifier.report_error(exc)
                    exc.reported = True
                raise
            except Exception:
                duration_ms = round((time.perf_counter() - start) * 1000, 2)
                log_event(
                    LOGGER,
                    logging.ERROR,
                    "operation_crashed",
                    operation=operation,
                    correlation_id=correlation_id,
                    duration_ms=duration_ms,
                    exc_info=True,
                )
                raise
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            log_event(
                LOGGER,
                logging.INFO,
                "operation_completed",
                operation=operation,
                correlation_id=correlation_id,
                duration_ms=duration_ms,
            )
            return result

        return wrapper  # type: ignore[return-value]

    return decorator


__all__ = ["instrument_operation"]
