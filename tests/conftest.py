"""
Pytest fixtures for logship tests.
"""

import json
import logging
import queue
import threading

import pytest

from logship.application.ports import END_OF_STREAM
from logship.core.counters import ProcessCounters
from logship.core.models import LogLevel, LogRecord
from logship.infrastructure.registry import ComponentRegistry


# Sample lines for each parser

@pytest.fixture
def sample_json_logs() -> list[str]:
    """Sample JSON structured log lines."""
    return [
        '{"timestamp": "2026-01-27T10:15:32.123Z", "level": "INFO", "message": "Application started", "service": "myapp"}',
        '{"timestamp": "2026-01-27T10:15:33.456Z", "level": "DEBUG", "message": "Processing request", "request_id": "abc-123"}',
        '{"timestamp": "2026-01-27T10:15:34.789Z", "level": "ERROR", "message": "Database connection failed", "error": "timeout"}',
    ]


@pytest.fixture
def sample_iis_logs() -> list[str]:
    """Sample IIS W3C log, header directives included."""
    return [
        "#Software: Microsoft Internet Information Services 10.0",
        "#Version: 1.0",
        "#Date: 2026-01-27 10:15:00",
        "#Fields: date time s-ip cs-method cs-uri-stem cs-uri-query s-port cs-username c-ip cs(User-Agent) cs(Referer) sc-status sc-substatus sc-win32-status time-taken",
        "2026-01-27 10:15:32 10.0.0.5 GET /index.html - 80 - 192.168.1.100 Mozilla/5.0+(Windows+NT+10.0) - 200 0 0 15",
        "2026-01-27 10:15:33 10.0.0.5 POST /api/login user=bob 443 - 192.168.1.101 curl/7.68.0 http://app.local/ 401 1 0 3",
        "2026-01-27 10:15:34 10.0.0.5 GET /api/data - 80 - 192.168.1.102 - - 500 0 64 120",
    ]


@pytest.fixture
def sample_generic_logs() -> list[str]:
    """Sample free-form text lines."""
    return [
        "2026-01-27 10:15:32 INFO Service started on port 8080",
        "2026-01-27T10:15:33Z WARN disk usage at 91%",
        "something failed without a timestamp",
    ]


@pytest.fixture
def counters() -> ProcessCounters:
    return ProcessCounters()


@pytest.fixture
def cancel_event() -> threading.Event:
    return threading.Event()


@pytest.fixture
def make_record():
    """Factory for records with sensible defaults."""
    def _make(message: str = "test message", level: LogLevel = LogLevel.INFO, **kwargs) -> LogRecord:
        return LogRecord(raw=message, message=message, level=level, **kwargs)
    return _make


@pytest.fixture
def write_config(tmp_path):
    """Write a configuration document and return its path."""
    def _write(data: dict, name: str = "agent.json", directory=None):
        target = (directory or tmp_path) / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps(data))
        return target
    return _write


@pytest.fixture(autouse=True)
def reset_logship_logger():
    """Detach any diagnostics handlers a test installed."""
    yield
    logger = logging.getLogger("logship")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def drain(subscriber: queue.Queue, timeout: float = 5.0) -> list:
    """Read a subscriber queue up to END_OF_STREAM."""
    items = []
    while True:
        item = subscriber.get(timeout=timeout)
        if item is END_OF_STREAM:
            return items
        items.append(item)


# Fake components for orchestrator tests

class FakeSource:
    """Records its lifecycle calls into a shared event log."""

    def __init__(self, declaration, events: list, fail_start: bool = False, fail_stop: bool = False):
        self.declaration = declaration
        self.name = declaration.name or declaration.kind
        self.events = events
        self.fail_start = fail_start
        self.fail_stop = fail_stop
        self.subscribers: list[queue.Queue] = []
        self.started = False
        self.stop_calls = 0

    def subscribe(self) -> queue.Queue:
        subscriber: queue.Queue = queue.Queue()
        self.subscribers.append(subscriber)
        return subscriber

    def start(self) -> None:
        self.events.append(("start", self.name))
        if self.fail_start:
            raise OSError("address already in use")
        self.started = True

    def stop(self) -> None:
        self.stop_calls += 1
        self.events.append(("stop", self.name))
        if self.fail_stop:
            raise RuntimeError("reader is stuck")


class FakeSink:
    """Records connects and stops into a shared event log."""

    def __init__(self, declaration, events: list, fail_connect: bool = False):
        self.declaration = declaration
        self.name = declaration.name or declaration.kind
        self.events = events
        self.fail_connect = fail_connect
        self.connected: list[str] = []
        self.stop_calls = 0

    def connect(self, source) -> None:
        self.events.append(("connect", self.name, source.name))
        if self.fail_connect:
            raise ConnectionError("destination refused")
        self.connected.append(source.name)

    def stop(self, timeout: float | None = None) -> None:
        self.stop_calls += 1
        self.events.append(("stop", self.name))


class FakeComponents:
    """
    A component registry building FakeSource/FakeSink for every kind.

    Declaration names listed in the failure sets make the matching
    component misbehave.
    """

    def __init__(self):
        self.events: list[tuple] = []
        self.sources: list[FakeSource] = []
        self.sinks: list[FakeSink] = []
        self.fail_create: set[str] = set()
        self.fail_start: set[str] = set()
        self.fail_stop: set[str] = set()
        self.fail_connect: set[str] = set()

        self.registry = ComponentRegistry()
        for kind in ("redis", "elasticsearch", "stdout"):
            self.registry.register_sink(kind, self._make_sink)
        for kind in ("json_logs", "iis_logs", "os_events", "logs", "tcp", "stdin"):
            self.registry.register_source(kind, self._make_source)

    def _make_source(self, declaration, cancel_event, counters):
        if declaration.name in self.fail_create:
            raise ValueError(f"cannot build {declaration.name}")
        source = FakeSource(
            declaration,
            self.events,
            fail_start=declaration.name in self.fail_start,
            fail_stop=declaration.name in self.fail_stop,
        )
        self.sources.append(source)
        return source

    def _make_sink(self, declaration, cancel_event, counters):
        if declaration.name in self.fail_create:
            raise ValueError(f"cannot build {declaration.name}")
        sink = FakeSink(
            declaration,
            self.events,
            fail_connect=declaration.name in self.fail_connect,
        )
        self.sinks.append(sink)
        return sink

    def connects(self) -> list[tuple[str, str]]:
        return [(e[1], e[2]) for e in self.events if e[0] == "connect"]


@pytest.fixture
def fake_components() -> FakeComponents:
    return FakeComponents()


class QueueSource:
    """Minimal source for sink tests: the test feeds the subscriber queues."""

    def __init__(self, name: str = "test-source"):
        self.name = name
        self.subscribers: list[queue.Queue] = []

    def subscribe(self) -> queue.Queue:
        subscriber: queue.Queue = queue.Queue()
        self.subscribers.append(subscriber)
        return subscriber

    def push(self, *items) -> None:
        for subscriber in self.subscribers:
            for item in items:
                subscriber.put(item)

    def end(self) -> None:
        self.push(END_OF_STREAM)

    def start(self) -> None:
        pass

    def stop(self) -> None:
        self.end()
