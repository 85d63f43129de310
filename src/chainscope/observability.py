"""Structured log events and StatsD metrics for chainscope components."""

from __future__ import annotations

import json
import logging
import socket
import threading
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator, Mapping

from chainscope.settings import Settings, get_settings

_LOGGER = logging.getLogger("chainscope.observability")

_client_lock = threading.Lock()
_shared_client: "StatsdClient | None" = None


class StatsdClient:
    """Fire-and-forget StatsD sender over UDP (DogStatsD tag syntax)."""

    def __init__(self, host: str, port: int, prefix: str = "") -> None:
        self.address = (host, port)
        self.prefix = prefix
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)

    def format(self, metric: str, value: float, metric_type: str, tags: Mapping[str, Any] | None = None) -> str:
        name = f"{self.prefix}.{metric}" if self.prefix else metric
        number = f"{value:.6f}".rstrip("0").rstrip(".") or "0"
        line = f"{name}:{number}|{metric_type}"
        clean = {str(key): str(val) for key, val in (tags or {}).items() if val is not None}
        if clean:
            line += "|#" + ",".join(f"{key}:{val}" for key, val in sorted(clean.items()))
        return line

    def send(self, metric: str, value: float, metric_type: str, tags: Mapping[str, Any] | None = None) -> None:
        try:
            self._sock.sendto(self.format(metric, value, metric_type, tags).encode("utf-8"), self.address)
        except OSError:  # pragma: no cover - metrics are best effort
            _LOGGER.debug("StatsD send failed for %s", metric, exc_info=True)


class Observability:
    """Per-component facade over the event log and the metrics client."""

    def __init__(
        self,
        *,
        settings: Settings,
        component: str | None = None,
        metrics: StatsdClient | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.component = component or "core"
        self.structured = bool(settings.observability.structured_logging)
        self.metrics = metrics
        self._logger = logger or _LOGGER

    def emit_event(self, event: str, **fields: Any) -> None:
        """Log ``event`` as one JSON line, or as ``event | {...}`` when structured logging is off."""

        record = {
            "event": event,
            "component": self.component,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **fields,
        }
        if self.structured:
            self._logger.info(json.dumps(record, default=str))
        else:
            self._logger.info("%s | %s", event, record)

    def increment(self, metric: str, *, value: float = 1.0, tags: Mapping[str, Any] | None = None) -> None:
        if self.metrics is not None:
            self.metrics.send(metric, value, "c", tags)

    def record_timing(self, metric: str, value_ms: float, *, tags: Mapping[str, Any] | None = None) -> None:
        if self.metrics is not None:
            self.metrics.send(metric, value_ms, "ms", tags)

    @contextmanager
    def timed(self, metric: str, *, tags: Mapping[str, Any] | None = None) -> Iterator[None]:
        """Record the wall time of the ``with`` block; nothing is recorded if it raises."""

        started = time.perf_counter()
        yield
        self.record_timing(metric, (time.perf_counter() - started) * 1000.0, tags=tags)


def _metrics_client(settings: Settings) -> StatsdClient | None:
    global _shared_client
    config = settings.observability
    if not config.statsd_host:
        return None
    with _client_lock:
        if _shared_client is None:
            _shared_client = StatsdClient(config.statsd_host, config.statsd_port, config.statsd_prefix)
        return _shared_client


def get_observability(*, component: str | None = None, settings: Settings | None = None) -> Observability:
    resolved = settings or get_settings()
    return Observability(settings=resolved, component=component, metrics=_metrics_client(resolved))


def reset_observability_cache() -> None:
    """Forget the shared StatsD client so the next lookup rebuilds it from settings."""

    global _shared_client
    with _client_lock:
        _shared_client = None


__all__ = ["Observability", "StatsdClient", "get_observability", "reset_observability_cache"]
