"""
Base class for output sinks.

A sink runs one consumer thread per connected source. Consumers batch
records and hand them to send(); failed batches are retried with
exponential backoff (tenacity) until they succeed or the sink stops.
"""

import logging
import queue
import threading
import time
from abc import ABC, abstractmethod

from tenacity import RetryCallState, Retrying, retry_if_exception_type, wait_exponential

from logship.application.ports import END_OF_STREAM, SourcePort
from logship.config.models import Declaration
from logship.core.counters import ProcessCounters
from logship.core.models import LogRecord

__all__ = ["BaseSink"]

logger = logging.getLogger(__name__)


class BaseSink(ABC):
    """
    Base class for every output kind.

    Subclasses must implement:
        - send(records: list[LogRecord]) -> None

    Optionally override:
        - close() -> None: release the destination
        - retry_exceptions: errors worth retrying (others drop the batch)
    """

    kind: str = "base"

    retry_exceptions: tuple[type[BaseException], ...] = (OSError,)

    initial_backoff: float = 0.5
    max_backoff: float = 30.0

    # Seconds a queue read blocks before re-checking for stop
    poll_timeout: float = 0.5

    # Seconds stop() gives consumers to drain
    stop_timeout: float = 5.0

    def __init__(
        self,
        declaration: Declaration,
        cancel_event: threading.Event,
        counters: ProcessCounters,
    ):
        self.declaration = declaration
        self.name = declaration.name or self.default_name()
        self.cancel_event = cancel_event
        self.counters = counters
        self.batch_size: int = getattr(declaration, "batch_size", 10)

        self._workers: list[threading.Thread] = []
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._stopped = False

        self.delivered = 0
        self.dropped = 0

    def default_name(self) -> str:
        return self.kind

    @property
    def connections(self) -> int:
        return len(self._workers)

    def connect(self, source: SourcePort) -> None:
        """Subscribe to a source and consume it on a background thread."""
        subscriber = source.subscribe()
        worker = threading.Thread(
            target=self._consume,
            args=(source.name, subscriber),
            name=f"sink-{self.name}<-{source.name}",
            daemon=True,
        )
        with self._lock:
            self._workers.append(worker)
        worker.start()
        logger.debug("Sink %s connected to source %s", self.name, source.name)

    def stop(self, timeout: float | None = None) -> None:
        """
        Drain and release the destination.

        Consumers get up to `timeout` seconds to finish what their sources
        already emitted (sources are expected to be stopped first).
        """
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            workers = list(self._workers)

        logger.info("Stopping sink %s", self.name)
        deadline = time.monotonic() + (self.stop_timeout if timeout is None else timeout)
        for worker in workers:
            worker.join(max(0.0, deadline - time.monotonic()))

        self._stop_event.set()
        for worker in workers:
            worker.join(self.poll_timeout * 2)
            if worker.is_alive():
                logger.warning("Sink %s: consumer %s did not finish", self.name, worker.name)

        self.close()

    @abstractmethod
    def send(self, records: list[LogRecord]) -> None:
        """Deliver one batch to the destination; raise on failure."""

    def close(self) -> None:
        """Release destination resources; called once by stop()."""

    def metadata(self) -> dict[str, str]:
        return {
            "sink_type": self.kind,
            "name": self.name,
            "connections": str(self.connections),
            "delivered": str(self.delivered),
            "dropped": str(self.dropped),
        }

    def _consume(self, source_name: str, subscriber: queue.Queue) -> None:
        finished = False
        while not finished:
            try:
                item = subscriber.get(timeout=self.poll_timeout)
            except queue.Empty:
                if self._stop_event.is_set():
                    break
                continue

            if item is END_OF_STREAM:
                break

            batch = [item]
            while len(batch) < self.batch_size:
                try:
                    item = subscriber.get_nowait()
                except queue.Empty:
                    break
                if item is END_OF_STREAM:
                    finished = True
                    break
                batch.append(item)

            self._deliver(batch)

        logger.debug("Sink %s finished consuming %s", self.name, source_name)

    def _deliver(self, batch: list[LogRecord]) -> bool:
        retrying = Retrying(
            retry=retry_if_exception_type(self.retry_exceptions),
            wait=wait_exponential(multiplier=self.initial_backoff, max=self.max_backoff),
            stop=self._give_up,
            sleep=self._stop_event.wait,
            before_sleep=self._log_retry,
            reraise=True,
        )
        try:
            retrying(self.send, batch)
        except self.retry_exceptions as e:
            logger.error(
                "Sink %s dropping %d records, destination still failing: %s",
                self.name, len(batch), e,
            )
            self._count(dropped=len(batch))
            return False
        except Exception:
            logger.exception("Sink %s dropping %d undeliverable records", self.name, len(batch))
            self._count(dropped=len(batch))
            return False

        self._count(delivered=len(batch))
        return True

    def _give_up(self, retry_state: RetryCallState) -> bool:
        return self._stop_event.is_set()

    def _log_retry(self, retry_state: RetryCallState) -> None:
        logger.warning(
            "Sink %s failed to deliver %d records (attempt %d), retrying in %.1fs: %s",
            self.name,
            len(retry_state.args[0]),
            retry_state.attempt_number,
            retry_state.next_action.sleep,
            retry_state.outcome.exception(),
        )

    def _count(self, delivered: int = 0, dropped: int = 0) -> None:
        with self._lock:
            self.delivered += delivered
            self.dropped += dropped

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
