"""
Port interfaces for the application layer.

These are the contracts the orchestrator relies on; concrete inputs and
outputs in the infrastructure layer implement them.
"""

import queue
import threading
from typing import Any, Callable, Protocol, runtime_checkable

from logship.config.models import Declaration
from logship.core.counters import ProcessCounters

__all__ = [
    "END_OF_STREAM",
    "SourcePort",
    "SinkPort",
    "SourceFactory",
    "SinkFactory",
]


# Placed on every subscriber queue once, when a source stops
END_OF_STREAM: Any = object()


@runtime_checkable
class SourcePort(Protocol):
    """
    Port for input sources.

    A source produces LogRecord objects onto every subscriber queue.
    It knows nothing about who subscribed.

    Contract:
    - I/O starts with start(), never in the constructor
    - stop() may be called any number of times, before or after start(),
      with the same effect as calling it once
    - after stop() returns nothing more is put on subscriber queues except
      a single END_OF_STREAM marker per queue
    """

    name: str

    def subscribe(self) -> "queue.Queue":
        """Register a new subscriber and return its queue."""
        ...

    def start(self) -> None:
        """Begin producing records."""
        ...

    def stop(self) -> None:
        """Stop producing records. Idempotent."""
        ...


@runtime_checkable
class SinkPort(Protocol):
    """
    Port for output sinks.

    Contract:
    - connect(source) does not block and does not raise for a valid source;
      it subscribes and consumes in the background
    - delivery failures, retries and backoff stay inside the sink
    - stop(timeout) drains what was already received, then releases the
      destination. Idempotent.
    """

    name: str

    def connect(self, source: SourcePort) -> None:
        """Subscribe to a source and forward its records."""
        ...

    def stop(self, timeout: float | None = None) -> None:
        """Flush and release the destination. Idempotent."""
        ...


SourceFactory = Callable[[Declaration, threading.Event, ProcessCounters], SourcePort]
SinkFactory = Callable[[Declaration, threading.Event, ProcessCounters], SinkPort]
