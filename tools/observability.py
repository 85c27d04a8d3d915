"""Timing and outcome logging for calls to weatherapi.com and the reasoning service."""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Awaitable, Callable, TypeVar

from models.errors import WeatherWearError
from weatherwear_app.logging_config import get_logger, log_event

LOGGER = get_logger(__name__)
R = TypeVar("R")

SLOW_CALL_FRACTION = 0.8


def _timeout_of(args: tuple) -> float | None:
    client = args[0] if args else None
    timeout = getattr(client, "timeout_seconds", None)
    return float(timeout) if isinstance(timeout, (int, float)) else None


def instrument_call(call_name: str) -> Callable[[Callable[..., Awaitable[R]]], Callable[..., Awaitable[R]]]:
    """Log one ``remote_call_completed`` or ``remote_call_failed`` record per call.

    The record carries the outcome (``ok`` or the error class), the duration
    and, for clients exposing ``timeout_seconds``, whether the call used more
    than 80% of its budget.
    """

    def decorator(func: Callable[..., Awaitable[R]]) -> Callable[..., Awaitable[R]]:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> R:
            timeout = _timeout_of(args)
            started = time.perf_counter()
            log_event(LOGGER, logging.DEBUG, "remote_call_started", remote_call=call_name)
            outcome = "ok"
            try:
                return await func(*args, **kwargs)
            except WeatherWearError as exc:
                outcome = type(exc).__name__
                raise
            except Exception as exc:
                outcome = f"unexpected:{type(exc).__name__}"
                raise
            finally:
                duration_ms = round((time.perf_counter() - started) * 1000, 2)
                fields = {"remote_call": call_name, "outcome": outcome, "duration_ms": duration_ms}
                if timeout:
                    fields["near_timeout"] = duration_ms >= timeout * 1000 * SLOW_CALL_FRACTION
                if outcome == "ok":
                    log_event(LOGGER, logging.INFO, "remote_call_completed", **fields)
                else:
                    log_event(LOGGER, logging.WARNING, "remote_call_failed", **fields)

        return wrapper

    return decorator


__all__ = ["instrument_call"]
