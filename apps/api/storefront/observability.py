import json
import logging
import time
from collections import defaultdict
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from threading import Lock

LOGGER_NAME = "airs.storefront"
CONTEXT_FIELDS = ("order_id", "order_number", "cart_id")

_request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)


class JsonFormatter(logging.Formatter):
    """One JSON object per line, carrying the request and order context of the event."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None) or _request_id_ctx.get(),
        }
        for name in CONTEXT_FIELDS:
            payload[name] = getattr(record, name, None)
        if record.exc_info:
            payload["error"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def configure_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level.upper())


@dataclass
class MetricsSnapshot:
    counters: dict[str, int]
    timings: dict[str, dict[str, float]]


class MetricsStore:
    """Process-local counters and timings; sync endpoints update it from worker threads."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._counters: dict[str, int] = defaultdict(int)
        self._timings: dict[str, list[float]] = defaultdict(list)

    def increment(self, name: str, amount: int = 1) -> None:
        with self._lock:
            self._counters[name] += amount

    def observe(self, name: str, value_s: float) -> None:
        with self._lock:
            self._timings[name].append(value_s)

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._timings.clear()

    def snapshot(self) -> MetricsSnapshot:
        with self._lock:
            counters = dict(self._counters)
            samples = {name: list(values) for name, values in self._timings.items() if values}
        timings = {
            name: {
                "count": float(len(values)),
                "avg_s": sum(values) / len(values),
                "max_s": max(values),
            }
            for name, values in samples.items()
        }
        return MetricsSnapshot(counters=counters, timings=timings)


metrics_store = MetricsStore()


def set_request_id(request_id: str) -> None:
    _request_id_ctx.set(request_id)


def get_request_id() -> str | None:
    return _request_id_ctx.get()


def log_event(
    message: str,
    *,
    order_id: str | None = None,
    order_number: str | None = None,
    cart_id: str | None = None,
    level: int = logging.INFO,
    exc_info: BaseException | None = None,
) -> None:
    logging.getLogger(LOGGER_NAME).log(
        level,
        message,
        exc_info=exc_info,
        extra={
            "request_id": get_request_id(),
            "order_id": order_id,
            "order_number": order_number,
            "cart_id": cart_id,
        },
    )


@contextmanager
def observe_timing(metric_name: str) -> Iterator[None]:
    start = time.perf_counter()
    try:
        yield
    finally:
        metrics_store.observe(metric_name, time.perf_counter() - start)
