"""Loguru sink that ships batched log events to Logflare over HTTP."""

import sys
import time
from datetime import UTC, datetime
from typing import Any

import httpx
from loguru import logger

from src.debugkit.runtime.config.config_data import AppConfig, LogflareConfig

_active_sink: "LogflareSink | None" = None


class LogflareSink:
    """Buffer loguru records and POST them to Logflare in batches.

    A batch is sent when ``batch_size`` events are buffered or when the oldest
    buffered event is older than ``flush_interval_ms``. Delivery failures are
    reported on stderr through ``sys.__stderr__`` rather than loguru, which
    would recurse into this sink.
    """

    def __init__(
        self,
        config: LogflareConfig,
        app: AppConfig,
        client: httpx.Client | None = None,
        clock=time.monotonic,
    ) -> None:
        self._config = config
        self._app = app
        self._client = client or httpx.Client(timeout=5.0)
        self._clock = clock
        self._buffer: list[dict[str, Any]] = []
        self._first_buffered_at: float | None = None
        self.failed_batches = 0

    @property
    def endpoint(self) -> str:
        return f"{self._config.api_base_url.rstrip('/')}/logs"

    def __call__(self, message) -> None:
        record = message.record
        self._buffer.append(self._to_event(record))
        if self._first_buffered_at is None:
            self._first_buffered_at = self._clock()

        interval_s = self._config.flush_interval_ms / 1000
        if (
            len(self._buffer) >= self._config.batch_size
            or self._clock() - self._first_buffered_at >= interval_s
        ):
            self.flush()

    def _to_event(self, record) -> dict[str, Any]:
        extra = {k: v for k, v in record["extra"].items() if _is_json_scalar(v)}
        metadata: dict[str, Any] = {
            "level": record["level"].name.lower(),
            "service": self._app.name,
            "environment": self._app.environment,
            "version": self._app.version,
            "logger": record["name"],
            "function": record["function"],
            "line": record["line"],
            **extra,
        }
        if record["exception"] is not None:
            exc_type, exc_value, _ = record["exception"]
            metadata["error"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
            }
        return {
            "message": record["message"],
            "timestamp": record["time"].astimezone(UTC).isoformat(),
            "metadata": metadata,
        }

    def flush(self) -> bool:
        """Send buffered events. Returns False if delivery failed."""
        if not self._buffer:
            return True

        batch, self._buffer = self._buffer, []
        self._first_buffered_at = None
        try:
            response = self._client.post(
                self.endpoint,
                params={"source": self._config.source_token},
                headers={"X-API-KEY": self._config.api_key or ""},
                json={"batch": batch},
            )
            response.raise_for_status()
            return True
        except httpx.HTTPError as e:
            self.failed_batches += 1
            print(
                f"{datetime.now(UTC).isoformat()} Logflare delivery failed "
                f"({len(batch)} events): {e}",
                file=sys.__stderr__,
            )
            return False

    def close(self) -> None:
        self.flush()
        self._client.close()


def _is_json_scalar(value: Any) -> bool:
    return value is None or isinstance(value, (str, int, float, bool))


_TRANSPORT_LOGGERS = ("httpx", "httpcore")


def is_transport_record(record) -> bool:
    """True for records emitted by the HTTP stack the sink itself ships logs with."""
    origin = record["extra"].get("logger_name") or record["name"] or ""
    return origin.startswith(_TRANSPORT_LOGGERS)


def install_logflare_sink(config: LogflareConfig, app: AppConfig, level: str) -> int:
    """Create the process-wide Logflare sink and register it with loguru."""
    global _active_sink
    _active_sink = LogflareSink(config, app)
    return logger.add(
        _active_sink, level=level, filter=lambda record: not is_transport_record(record)
    )


def flush_logs() -> bool:
    """Flush the process-wide Logflare sink, if one is installed."""
    if _active_sink is None:
        return True
    return _active_sink.flush()
