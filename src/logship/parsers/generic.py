"""
Generic fallback parser for plain text logs.
"""

import re
from datetime import datetime

from logship.core.base import BaseParser
from logship.core.models import LogRecord, LogLevel

__all__ = ["GenericParser"]


class GenericParser(BaseParser):
    """
    Parser for logs with no declared structure.

    Attempts to extract:
    - Timestamp (if a leading recognizable pattern is found)
    - Log level (if common keywords are found)
    - Message (the remainder after the timestamp)
    """

    name = "generic"
    supported_formats = ["generic", "text", "plain"]

    TIMESTAMP_PATTERNS = [
        # ISO 8601
        (r'^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:Z|[+-]\d{2}:?\d{2})?)\s*', "iso"),
        (r'^(\d{4}-\d{2}-\d{2}\s+\d{2}:\d{2}:\d{2}(?:[,\.]\d+)?)\s*', "%Y-%m-%d %H:%M:%S"),
        (r'^(\d{4}/\d{2}/\d{2}\s+\d{2}:\d{2}:\d{2})\s*', "%Y/%m/%d %H:%M:%S"),
        (r'^(\d{2}/\d{2}/\d{4}\s+\d{2}:\d{2}:\d{2})\s*', "%m/%d/%Y %H:%M:%S"),
        # Unix timestamp (milliseconds, then seconds)
        (r'^(\d{13})\s+', "unix_ms"),
        (r'^(\d{10})\s+', "unix"),
    ]

    _compiled_ts_patterns = [(re.compile(p), f) for p, f in TIMESTAMP_PATTERNS]

    LEVEL_PATTERNS = [
        (re.compile(r'\b(EMERG|EMERGENCY)\b', re.I), LogLevel.EMERGENCY),
        (re.compile(r'\b(ALERT)\b', re.I), LogLevel.ALERT),
        (re.compile(r'\b(CRIT|CRITICAL|FATAL)\b', re.I), LogLevel.CRITICAL),
        (re.compile(r'\b(ERR|ERROR)\b', re.I), LogLevel.ERROR),
        (re.compile(r'\b(WARN|WARNING)\b', re.I), LogLevel.WARNING),
        (re.compile(r'\b(NOTICE)\b', re.I), LogLevel.NOTICE),
        (re.compile(r'\b(INFO)\b', re.I), LogLevel.INFO),
        (re.compile(r'\b(DEBUG)\b', re.I), LogLevel.DEBUG),
        (re.compile(r'\b(TRACE|VERBOSE)\b', re.I), LogLevel.TRACE),
    ]

    def parse_line(self, line: str) -> LogRecord | None:
        record = LogRecord(raw=line)
        record.parser_name = self.name

        stripped = line.strip()
        message = stripped

        for pattern, fmt in self._compiled_ts_patterns:
            match = pattern.match(stripped)
            if match:
                record.timestamp = self._parse_generic_timestamp(match.group(1), fmt)
                if record.timestamp:
                    message = stripped[match.end():].strip()
                    break

        for pattern, level in self.LEVEL_PATTERNS:
            if pattern.search(message):
                record.level = level
                break

        if record.level == LogLevel.UNKNOWN:
            record.level = self._infer_level_from_message(message)

        record.message = message
        return record

    def _parse_generic_timestamp(self, ts_str: str, fmt: str) -> datetime | None:
        if fmt == "unix":
            try:
                return datetime.fromtimestamp(int(ts_str))
            except (ValueError, OSError):
                return None

        if fmt == "unix_ms":
            try:
                return datetime.fromtimestamp(int(ts_str) / 1000)
            except (ValueError, OSError):
                return None

        if fmt == "iso":
            return self._parse_timestamp(ts_str.replace("Z", "+00:00"))

        try:
            return datetime.strptime(ts_str.replace(",", ".").split(".")[0], fmt)
        except ValueError:
            return None
