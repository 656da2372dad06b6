"""
Tests for core data models, counters and exceptions.
"""

import json
import threading
from datetime import datetime, timezone

import pytest

from logship.core.counters import ProcessCounters
from logship.core.exceptions import (
    AssemblyError,
    ConfigurationInvalid,
    LogshipError,
    SourceShutdownFailure,
)
from logship.core.models import HTTPInfo, LogLevel, LogRecord, RecordOrigin


class TestLogLevel:
    """Tests for LogLevel enum."""

    @pytest.mark.parametrize("value,expected", [
        ("INFO", LogLevel.INFO),
        ("information", LogLevel.INFO),
        ("warn", LogLevel.WARNING),
        ("err", LogLevel.ERROR),
        ("fatal", LogLevel.CRITICAL),
        ("0", LogLevel.EMERGENCY),
        ("4", LogLevel.WARNING),
        ("7", LogLevel.DEBUG),
        ("nonsense", LogLevel.UNKNOWN),
    ])
    def test_from_string(self, value, expected):
        assert LogLevel.from_string(value) == expected

    def test_ordering(self):
        assert LogLevel.ERROR > LogLevel.WARNING
        assert LogLevel.DEBUG <= LogLevel.INFO
        assert LogLevel.TRACE < LogLevel.DEBUG


class TestLogRecord:
    """Tests for LogRecord."""

    def test_defaults(self):
        record = LogRecord()
        assert record.timestamp is None
        assert record.received_at.tzinfo is not None
        assert record.host
        assert record.effective_timestamp == record.received_at

    def test_to_dict(self, make_record):
        record = make_record(
            "GET / -> 500",
            level=LogLevel.ERROR,
            timestamp=datetime(2026, 1, 27, 10, 0, 0, tzinfo=timezone.utc),
            type="iis_logs",
            fields={"s-ip": "10.0.0.5"},
            origin=RecordOrigin(input_name="web", file_path="u_ex260127.log", line_number=7),
            http=HTTPInfo(method="GET", path="/", status_code=500),
        )

        document = record.to_dict()
        assert document["@timestamp"] == "2026-01-27T10:00:00+00:00"
        assert document["@version"] == "1"
        assert document["type"] == "iis_logs"
        assert document["level"] == "ERROR"
        assert document["message"] == "GET / -> 500"
        assert document["s-ip"] == "10.0.0.5"
        assert document["origin"] == {"input_name": "web", "file_path": "u_ex260127.log", "line_number": 7}
        assert document["http"] == {"method": "GET", "path": "/", "status_code": 500}
        assert "network" not in document
        assert "parse_errors" not in document
        json.dumps(document)

    def test_fields_cannot_override_envelope(self, make_record):
        record = make_record("real message", fields={"message": "shadow", "type": "shadow"})
        document = record.to_dict()
        assert document["message"] == "real message"
        assert document["type"] == "unknown"

    def test_formatted_timestamp(self, make_record):
        record = make_record(timestamp=datetime(2026, 1, 27, 8, 5, 9))
        assert record.formatted_timestamp("%H:%M:%S") == "08:05:09"


class TestProcessCounters:
    """Tests for ProcessCounters."""

    def test_add(self):
        counters = ProcessCounters()
        assert counters.add_messages() == 1
        assert counters.add_messages(4) == 5
        assert counters.add_connections(2) == 2
        assert counters.add_connections(-1) == 1
        assert counters.snapshot() == {"connections": 1, "messages": 5}

    def test_concurrent_adds(self):
        counters = ProcessCounters()

        def work():
            for _ in range(2000):
                counters.add_messages()
                counters.add_connections(1)
                counters.add_connections(-1)

        threads = [threading.Thread(target=work) for _ in range(6)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert counters.messages == 12000
        assert counters.connections == 0


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_hierarchy(self):
        assert issubclass(ConfigurationInvalid, LogshipError)
        assert issubclass(AssemblyError, LogshipError)

    def test_details_in_str(self):
        error = ConfigurationInvalid("Unknown field(s): x", path="a.json", config_key="stdout[0]")
        assert str(error) == "Unknown field(s): x - {'path': 'a.json', 'config_key': 'stdout[0]'}"

    def test_plain_message(self):
        assert str(LogshipError("boom")) == "boom"

    def test_source_shutdown_failure(self):
        error = SourceShutdownFailure("stop failed", source_name="tcp:5140")
        assert error.source_name == "tcp:5140"
        assert error.details == {"source": "tcp:5140"}
