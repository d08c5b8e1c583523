"""Structured call logging for the external capabilities the matcher depends on."""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Callable, ParamSpec, TypeVar

from lostfound_app.logging_config import ensure_correlation_id, get_logger, log_event

LOGGER = get_logger(__name__)
P = ParamSpec("P")
R = TypeVar("R")


def _elapsed_ms(since: float) -> float:
    return round((time.perf_counter() - since) * 1000, 2)


def instrument_collaborator(collaborator: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Log start, completion and failure of a collaborator call.

    Arguments are never logged; they carry descriptions and image references.
    Failures are logged at WARNING and re-raised unchanged.
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            fields = {"collaborator": collaborator, "correlation_id": ensure_correlation_id()}
            log_event(LOGGER, logging.DEBUG, "collaborator_call_started", **fields)
            started = time.perf_counter()
            failure: str | None = None
            try:
                return func(*args, **kwargs)
            except Exception as exc:
                failure = type(exc).__name__
                raise
            finally:
                if failure is None:
                    log_event(
                        LOGGER,
                        logging.DEBUG,
                        "collaborator_call_completed",
                        duration_ms=_elapsed_ms(started),
                        **fields,
                    )
                else:
                    log_event(
                        LOGGER,
                        logging.WARNING,
                        "collaborator_call_failed",
                        duration_ms=_elapsed_ms(started),
                        error=failure,
                        **fields,
                    )

        return wrapper

    return decorator


__all__ = ["instrument_collaborator"]
