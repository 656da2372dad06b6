"""
Tests for built-in parsers.
"""

from datetime import datetime, timezone

import pytest

from logship.core.models import LogLevel
from logship.parsers import ParserRegistry, registry
from logship.parsers.generic import GenericParser
from logship.parsers.json_parser import JSONParser
from logship.parsers.w3c import W3CParser


def parse_all(parser, lines) -> list:
    records = (parser.parse_line(line.strip()) for line in lines if line.strip())
    return [record for record in records if record is not None]


class TestParserRegistry:
    """Tests for ParserRegistry."""

    def test_get_parser_by_format(self):
        assert isinstance(registry.get_parser("ndjson"), JSONParser)
        assert isinstance(registry.get_parser("iis"), W3CParser)
        assert isinstance(registry.get_parser("text"), GenericParser)

    def test_get_parser_by_parser_name(self):
        assert isinstance(registry.get_parser("w3c"), W3CParser)

    def test_get_parser_not_found(self):
        assert registry.get_parser("nonexistent_format") is None

    def test_fresh_instance_per_lookup(self):
        """Test parsers with per-file state are never shared."""
        assert registry.get_parser("w3c") is not registry.get_parser("w3c")

    def test_list_parsers(self):
        assert sorted(registry.list_parsers()) == ["generic", "json", "w3c"]

    def test_custom_registry(self):
        custom = ParserRegistry()
        custom.register(GenericParser)
        assert custom.list_formats() == ["generic", "text", "plain"]
        assert custom.get_parser("json") is None


class TestJSONParser:
    """Tests for JSONParser."""

    @pytest.fixture
    def parser(self):
        return JSONParser()

    def test_parse_basic_json(self, parser):
        record = parser.parse_line(
            '{"timestamp": "2026-01-27T10:15:32Z", "level": "INFO", "message": "Test"}'
        )
        assert record.message == "Test"
        assert record.level == LogLevel.INFO
        assert record.timestamp.year == 2026
        assert record.parser_name == "json"
        assert not record.parse_errors

    def test_extra_keys_kept_as_fields(self, parser, sample_json_logs):
        record = parser.parse_line(sample_json_logs[0])
        assert record.fields == {"service": "myapp"}

    def test_alternative_field_names(self, parser):
        record = parser.parse_line('{"ts": "2026-01-27 10:15:32", "severity": "warn", "msg": "careful"}')
        assert record.message == "careful"
        assert record.level == LogLevel.WARNING
        assert record.timestamp == datetime(2026, 1, 27, 10, 15, 32)

    def test_journald_fields(self, parser):
        record = parser.parse_line('{"MESSAGE": "Started nginx", "PRIORITY": "3", "_PID": "1"}')
        assert record.message == "Started nginx"
        assert record.level == LogLevel.ERROR
        assert record.fields == {"_PID": "1"}

    def test_message_summary(self, parser):
        record = parser.parse_line('{"action": "login", "status": "ok"}')
        assert record.message == "action=login, status=ok"

    def test_invalid_json(self, parser):
        record = parser.parse_line("{not json")
        assert record.parse_errors
        assert record.message == "{not json"

    def test_non_object(self, parser):
        record = parser.parse_line("[1, 2, 3]")
        assert record.parse_errors == ["JSON is not an object"]

    def test_sample_levels(self, parser, sample_json_logs):
        records = parse_all(parser, sample_json_logs + ["", "   "])
        assert [r.level for r in records] == [LogLevel.INFO, LogLevel.DEBUG, LogLevel.ERROR]


class TestW3CParser:
    """Tests for W3CParser."""

    @pytest.fixture
    def parser(self):
        return W3CParser()

    def test_directives_produce_no_record(self, parser, sample_iis_logs):
        for line in sample_iis_logs[:4]:
            assert parser.parse_line(line) is None

    def test_parse_iis_lines(self, parser, sample_iis_logs):
        records = parse_all(parser, sample_iis_logs)
        assert len(records) == 3

        ok, unauthorized, failed = records
        assert ok.timestamp == datetime(2026, 1, 27, 10, 15, 32, tzinfo=timezone.utc)
        assert ok.http.method == "GET"
        assert ok.http.path == "/index.html"
        assert ok.http.status_code == 200
        assert ok.http.response_time_ms == 15.0
        assert ok.network.source_ip == "192.168.1.100"
        assert ok.network.destination_port == 80
        assert ok.network.user_agent == "Mozilla/5.0 (Windows NT 10.0)"
        assert ok.level == LogLevel.INFO
        assert ok.message == "GET /index.html -> 200"

        assert unauthorized.http.query_string == "user=bob"
        assert unauthorized.http.substatus == 1
        assert unauthorized.network.referer == "http://app.local/"
        assert unauthorized.level == LogLevel.WARNING

        assert failed.level == LogLevel.ERROR
        assert failed.network.user_agent is None

    def test_dash_means_absent(self, parser, sample_iis_logs):
        records = parse_all(parser, sample_iis_logs)
        assert "cs-uri-query" not in records[0].fields
        assert records[0].http.query_string is None

    def test_fields_directive_changes_layout(self, parser):
        parser.parse_line("#Fields: date time cs-method cs-uri-stem sc-status")
        record = parser.parse_line("2026-01-27 10:15:32 DELETE /items/4 204")

        assert record.http.method == "DELETE"
        assert record.http.status_code == 204
        assert not record.parse_errors

    def test_default_layout_without_header(self, parser):
        record = parser.parse_line(
            "2026-01-27 10:15:32 10.0.0.5 GET / - 80 - 10.1.1.1 agent - 200 0 0 7"
        )
        assert record.http.status_code == 200
        assert record.network.source_ip == "10.1.1.1"

    def test_column_count_mismatch(self, parser):
        parser.parse_line("#Fields: date time sc-status")
        record = parser.parse_line("2026-01-27 10:15:32")
        assert record.parse_errors
        assert record.level == LogLevel.UNKNOWN


class TestGenericParser:
    """Tests for GenericParser."""

    @pytest.fixture
    def parser(self):
        return GenericParser()

    def test_timestamp_and_level(self, parser, sample_generic_logs):
        record = parser.parse_line(sample_generic_logs[0])
        assert record.timestamp == datetime(2026, 1, 27, 10, 15, 32)
        assert record.level == LogLevel.INFO
        assert record.message == "INFO Service started on port 8080"

    def test_iso_timestamp(self, parser, sample_generic_logs):
        record = parser.parse_line(sample_generic_logs[1])
        assert record.timestamp.tzinfo is not None
        assert record.level == LogLevel.WARNING

    def test_inferred_level(self, parser, sample_generic_logs):
        record = parser.parse_line(sample_generic_logs[2])
        assert record.timestamp is None
        assert record.level == LogLevel.ERROR

    def test_plain_message(self, parser):
        record = parser.parse_line("user logged in")
        assert record.level == LogLevel.INFO
        assert record.message == "user logged in"
