"""
Base class for input sources.

A source runs its reader on a background thread and fans every record
out to the queues of its subscribers.
"""

import logging
import queue
import threading
from abc import ABC, abstractmethod

from logship.application.ports import END_OF_STREAM
from logship.config.models import Declaration
from logship.core.counters import ProcessCounters
from logship.core.models import LogRecord
from logship.parsers import registry

__all__ = ["BaseSource"]

logger = logging.getLogger(__name__)


class BaseSource(ABC):
    """
    Base class for every input kind.

    Subclasses must implement:
        - run() -> None: read until self.stopping, calling self.emit()

    Optionally override:
        - close() -> None: unblock I/O that run() may be waiting on
        - metadata() -> dict[str, str]

    Lifecycle:
        constructed -> start() -> stop()

    stop() may be called before start(), and any number of times.
    """

    kind: str = "base"

    # How long stop() waits for the reader thread
    join_timeout: float = 5.0

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

        self._subscribers: list[queue.Queue] = []
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._stop_requested = False
        self._starting = False
        self._ended = False
        self._thread: threading.Thread | None = None
        self._emitted = 0

    def default_name(self) -> str:
        return self.kind

    @property
    def stopping(self) -> bool:
        """True once stop() was called or the process is shutting down."""
        return self._stop_event.is_set() or self.cancel_event.is_set()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def emitted(self) -> int:
        return self._emitted

    def subscribe(self) -> queue.Queue:
        subscriber: queue.Queue = queue.Queue()
        with self._lock:
            if self._ended:
                subscriber.put(END_OF_STREAM)
            self._subscribers.append(subscriber)
        return subscriber

    def start(self) -> None:
        """Start the reader thread. Does nothing if already started or stopped."""
        with self._lock:
            if self._thread is not None or self._starting or self._stop_requested:
                return
            self._starting = True

        try:
            self.open()
        except BaseException:
            with self._lock:
                self._starting = False
            raise

        thread = threading.Thread(
            target=self._run_reader,
            name=f"source-{self.name}",
            daemon=True,
        )
        with self._lock:
            self._starting = False
            if not self._stop_requested:
                thread.start()
                self._thread = thread
                return

        # stop() ran while open() was in progress and may have found
        # nothing to release yet
        logger.debug("Source %s was stopped while starting", self.name)
        self.close()

    def stop(self) -> None:
        """
        Stop producing records.

        Subscribers receive END_OF_STREAM; nothing is emitted afterwards.
        """
        with self._lock:
            if self._stop_requested:
                return
            self._stop_requested = True
            self._stop_event.set()

        logger.info("Stopping source %s", self.name)
        self._end_stream()
        self.close()

        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(self.join_timeout)
            if thread.is_alive():
                logger.warning("Source %s did not stop within %.1fs", self.name, self.join_timeout)

    def emit(self, record: LogRecord) -> bool:
        """
        Deliver a record to every subscriber.

        Returns:
            False once the source has ended; the record was dropped
        """
        record.type = self.kind
        record.origin.input_name = self.name

        with self._lock:
            if self._ended:
                return False
            for subscriber in self._subscribers:
                subscriber.put(record)
            self._emitted += 1

        self.counters.add_messages(1)
        return True

    def wait(self, timeout: float) -> bool:
        """Sleep up to timeout seconds; returns True if the source is stopping."""
        self._stop_event.wait(timeout)
        return self.stopping

    def parse_text_line(self, line: str) -> LogRecord | None:
        """Parse a free-form line: JSON objects as structured, anything else as text."""
        stripped = line.strip()
        if not stripped:
            return None
        format_name = "json" if stripped.startswith("{") else "generic"
        record = registry.get_parser(format_name).parse_line(stripped)
        if record is not None and record.parse_errors and format_name == "json":
            record = registry.get_parser("generic").parse_line(stripped)
        return record

    def open(self) -> None:
        """Acquire resources before the reader thread starts."""

    def close(self) -> None:
        """Release resources; called by stop(), and by start() when stop() won the race."""

    @abstractmethod
    def run(self) -> None:
        """Read input and emit records until self.stopping."""

    def metadata(self) -> dict[str, str]:
        return {
            "source_type": self.kind,
            "name": self.name,
            "emitted": str(self._emitted),
            "running": str(self.running),
        }

    def _run_reader(self) -> None:
        logger.info("Source %s started", self.name)
        try:
            self.run()
        except Exception:
            logger.exception("Source %s failed", self.name)
        finally:
            self._end_stream()
            logger.debug("Source %s reader finished", self.name)

    def _end_stream(self) -> None:
        with self._lock:
            if self._ended:
                return
            self._ended = True
            for subscriber in self._subscribers:
                subscriber.put(END_OF_STREAM)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
