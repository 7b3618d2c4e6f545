"""Thin wrapper over the Sentry SDK.

Every function is safe to call before (or without) :func:`initialize_sentry`;
the SDK turns calls into no-ops when no client is bound.
"""

from datetime import UTC, datetime
from typing import Any

import sentry_sdk
from loguru import logger
from sentry_sdk.integrations.loguru import LoguruIntegration

from src.debugkit.runtime.config.config_data import ConfigData


def initialize_sentry(config: ConfigData) -> bool:
    """Initialise the Sentry SDK from configuration.

    Returns:
        True when the SDK was initialised, False when no DSN is configured or
        the SDK rejected the configuration.
    """
    sentry = config.sentry
    if not sentry.dsn:
        logger.warning("Sentry: no DSN configured, skipping initialization")
        return False

    integrations = [LoguruIntegration()] if sentry.enable_logs else []
    try:
        sentry_sdk.init(
            dsn=sentry.dsn,
            traces_sample_rate=sentry.traces_sample_rate,
            environment=sentry.environment or config.app.environment,
            release=sentry.release or config.app.version,
            debug=sentry.debug and config.app.environment == "development",
            integrations=integrations,
        )
    except Exception as e:
        # BadDsn and friends; the process keeps running without error tracking
        logger.error("Failed to initialize Sentry: {}", e)
        return False

    logger.info("Sentry initialized for environment {}", sentry.environment or config.app.environment)
    return True


def capture_exception(
    error: BaseException,
    context: dict[str, Any] | None = None,
    correlation_id: str | None = None,
) -> str | None:
    """Report an exception with merged tags and extras.

    ``context`` may carry ``tags`` and ``extra`` dictionaries; the correlation id
    becomes the ``correlationId`` tag and every event gets a ``timestamp`` extra.
    """
    context = context or {}
    tags = dict(context.get("tags") or {})
    if correlation_id:
        tags["correlationId"] = correlation_id
    extras = {
        **(context.get("extra") or {}),
        "timestamp": datetime.now(UTC).isoformat(),
    }
    return sentry_sdk.capture_exception(error, tags=tags, extras=extras)


def capture_message(
    message: str, level: str = "info", context: dict[str, Any] | None = None
) -> str | None:
    context = context or {}
    return sentry_sdk.capture_message(
        message,
        level=level,
        tags=context.get("tags") or {},
        extras=context.get("extra") or {},
    )


def add_breadcrumb(
    message: str, category: str = "debugkit", level: str = "info", **data: Any
) -> None:
    sentry_sdk.add_breadcrumb(message=message, category=category, level=level, data=data)


def flush(timeout_seconds: float = 2.0) -> None:
    """Block until queued events are sent or the timeout elapses."""
    sentry_sdk.flush(timeout=timeout_seconds)
    logger.debug("Sentry events flushed")
