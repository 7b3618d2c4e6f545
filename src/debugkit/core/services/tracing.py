"""Debug sessions and performance measurement on top of loguru and Sentry.

A debug session binds a correlation id into every log record emitted while it
is open (the ``correlation_id`` extra shown by the console format) and keeps it
available so errors reported to Sentry carry the same id as the logs.
"""

import time
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any

from loguru import logger

from src.debugkit.core.services.error_tracking import add_breadcrumb

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)


@dataclass
class Measurement:
    operation: str
    duration_ms: float | None = None
    succeeded: bool | None = None


def current_correlation_id() -> str | None:
    """Correlation id of the innermost open debug session, if any."""
    return _correlation_id.get()


@contextmanager
def debug_session(
    correlation_id: str | None = None, **context: Any
) -> Generator[str, None, None]:
    """Open a debug session and yield its correlation id.

    A fresh UUID is generated unless ``correlation_id`` is given. ``context``
    is attached to the start record and to the Sentry breadcrumb.
    """
    cid = correlation_id or str(uuid.uuid4())
    token = _correlation_id.set(cid)
    started = time.perf_counter()
    try:
        with logger.contextualize(correlation_id=cid):
            logger.bind(**context).debug("Debug session {} started", cid)
            add_breadcrumb(
                "Debug session started", category="session", correlation_id=cid, **context
            )
            try:
                yield cid
            finally:
                logger.debug(
                    "Debug session {} ended after {:.0f}ms",
                    cid,
                    (time.perf_counter() - started) * 1000,
                )
    finally:
        _correlation_id.reset(token)


@contextmanager
def measure_performance(operation: str, **data: Any) -> Generator[Measurement, None, None]:
    """Time the enclosed block, log the duration and leave a Sentry breadcrumb.

    Exceptions are logged with the elapsed time and re-raised unchanged.
    """
    measurement = Measurement(operation=operation)
    started = time.perf_counter()
    try:
        yield measurement
    except Exception as e:
        measurement.duration_ms = (time.perf_counter() - started) * 1000
        measurement.succeeded = False
        logger.bind(operation=operation, duration_ms=measurement.duration_ms, **data).warning(
            "{} failed after {:.0f}ms: {}", operation, measurement.duration_ms, e
        )
        add_breadcrumb(
            f"{operation} failed",
            category="performance",
            level="error",
            duration_ms=round(measurement.duration_ms, 2),
            error=type(e).__name__,
            **data,
        )
        raise

    measurement.duration_ms = (time.perf_counter() - started) * 1000
    measurement.succeeded = True
    logger.bind(operation=operation, duration_ms=measurement.duration_ms, **data).debug(
        "{} completed in {:.0f}ms", operation, measurement.duration_ms
    )
    add_breadcrumb(
        f"{operation} completed",
        category="performance",
        duration_ms=round(measurement.duration_ms, 2),
        **data,
    )
