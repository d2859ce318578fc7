"""
ItemDeck Services — Logging instrumentation.

``@instrumented`` wraps one async operation with start/finish logging and
elapsed time; ``instrument_service`` applies it to every public coroutine
method of a service instance without subclassing it::

    service = instrument_service(ItemService(repository))
    await service.get_by_id(1)
    # Starting get_by_id (1)
    # No result for get_by_id (1) in 0.41ms
"""

from __future__ import annotations

import functools
import inspect
import logging
import time
from typing import Any, Callable, Optional, TypeVar

logger = logging.getLogger("itemdeck.services")

T = TypeVar("T")


def _describe_args(args: tuple, kwargs: dict) -> str:
    parts = [repr(a) for a in args]
    parts.extend(f"{k}={v!r}" for k, v in kwargs.items())
    return ", ".join(parts)


def instrumented(operation: str, log: Optional[logging.Logger] = None):
    """
    Decorator for a single async operation.

    Logs:
    - INFO on start
    - INFO on success with elapsed milliseconds (and item count for lists)
    - WARNING when the operation returns ``None``
    - ERROR with elapsed milliseconds on failure; the error is re-raised
    """
    log = log or logger

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            described = _describe_args(args, kwargs)
            log.info(f"Starting {operation} ({described})")
            start = time.perf_counter()

            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                elapsed = (time.perf_counter() - start) * 1000
                log.error(f"Error in {operation} ({described}) after {elapsed:.2f}ms: {e}")
                raise

            elapsed = (time.perf_counter() - start) * 1000
            if result is None:
                log.warning(f"No result for {operation} ({described}) in {elapsed:.2f}ms")
            elif isinstance(result, list):
                log.info(f"Completed {operation}: {len(result)} items in {elapsed:.2f}ms")
            else:
                log.info(f"Completed {operation} ({described}) in {elapsed:.2f}ms")
            return result

        wrapper.__instrumented__ = operation
        return wrapper

    return decorator


def instrument_service(service: Any, log: Optional[logging.Logger] = None) -> Any:
    """
    Instrument every public coroutine method of ``service`` in place.

    Methods already wrapped are left alone, so calling this twice does not
    double the log lines. Returns the same instance.
    """
    for name, method in inspect.getmembers(service, inspect.iscoroutinefunction):
        if name.startswith("_") or getattr(method, "__instrumented__", None):
            continue
        setattr(service, name, instrumented(name, log)(method))
    return service
