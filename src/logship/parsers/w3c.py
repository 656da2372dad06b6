"""
W3C Extended Log File Format parser (IIS, and other servers writing W3C logs).
"""

from datetime import timezone

from logship.core.base import BaseParser
from logship.core.models import LogRecord, LogLevel, HTTPInfo, NetworkInfo

__all__ = ["W3CParser"]


# Default field list IIS writes when logging in W3C format
DEFAULT_IIS_FIELDS = [
    "date", "time", "s-ip", "cs-method", "cs-uri-stem", "cs-uri-query",
    "s-port", "cs-username", "c-ip", "cs(User-Agent)", "cs(Referer)",
    "sc-status", "sc-substatus", "sc-win32-status", "time-taken",
]


class W3CParser(BaseParser):
    """
    Parse W3C extended log lines.

    The column layout comes from the most recent ``#Fields:`` directive;
    until one is seen the IIS default layout is assumed. Directive lines
    update parser state and produce no record, which is why a parser
    instance must not be shared between files.

    Example:
        parser = W3CParser()
        parser.parse_line("#Fields: date time cs-method cs-uri-stem sc-status")
        record = parser.parse_line("2026-01-27 10:15:32 GET /index.html 200")
        record.http.status_code  # 200
    """

    name = "w3c"
    supported_formats = ["w3c", "iis", "iis_w3c"]

    def __init__(self):
        super().__init__()
        self.field_names: list[str] = list(DEFAULT_IIS_FIELDS)

    def parse_line(self, line: str) -> LogRecord | None:
        stripped = line.strip()
        if not stripped:
            return None

        if stripped.startswith("#"):
            self._handle_directive(stripped)
            return None

        values = stripped.split()
        record = LogRecord(raw=line, parser_name=self.name)

        if len(values) != len(self.field_names):
            record.parse_errors.append(
                f"Expected {len(self.field_names)} fields, got {len(values)}"
            )

        data = {
            name: value
            for name, value in zip(self.field_names, values)
            if value != "-"
        }
        record.fields = dict(data)

        if "date" in data and "time" in data:
            ts = self._parse_timestamp(f"{data['date']} {data['time']}")
            if ts:
                # W3C timestamps are always UTC
                record.timestamp = ts.replace(tzinfo=timezone.utc)

        record.network = NetworkInfo(
            source_ip=data.get("c-ip"),
            destination_ip=data.get("s-ip"),
            destination_port=self._to_int(data.get("s-port")),
            user_agent=self._decode(data.get("cs(User-Agent)")),
            referer=data.get("cs(Referer)"),
        )
        record.http = HTTPInfo(
            method=data.get("cs-method"),
            path=data.get("cs-uri-stem"),
            query_string=data.get("cs-uri-query"),
            status_code=self._to_int(data.get("sc-status")),
            substatus=self._to_int(data.get("sc-substatus")),
            response_size=self._to_int(data.get("sc-bytes")),
            response_time_ms=self._to_float(data.get("time-taken")),
        )

        status = record.http.status_code
        if status is None:
            record.level = LogLevel.UNKNOWN
        elif status >= 500:
            record.level = LogLevel.ERROR
        elif status >= 400:
            record.level = LogLevel.WARNING
        else:
            record.level = LogLevel.INFO

        parts = [p for p in (record.http.method, record.http.path) if p]
        if status is not None:
            parts.append(f"-> {status}")
        record.message = " ".join(parts) or stripped

        return record

    def _handle_directive(self, line: str) -> None:
        directive, _, value = line[1:].partition(":")
        if directive.strip().lower() == "fields":
            names = value.split()
            if names:
                self.field_names = names

    @staticmethod
    def _decode(value: str | None) -> str | None:
        # IIS replaces spaces with '+' in header fields
        if value is None:
            return None
        return value.replace("+", " ")

    @staticmethod
    def _to_int(value: str | None) -> int | None:
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    @staticmethod
    def _to_float(value: str | None) -> float | None:
        if value is None:
            return None
        try:
            return float(value)
        except ValueError:
            return None
