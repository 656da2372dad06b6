"""
JSON lines parser for structured logs.
"""

import json
from typing import Any

from logship.core.base import BaseParser
from logship.core.models import LogRecord, LogLevel

__all__ = ["JSONParser"]


class JSONParser(BaseParser):
    """
    Parse JSON-formatted structured logs (JSONL/NDJSON).

    Handles common field naming conventions across logging libraries
    and journald exports. Every key of the object is kept in
    ``record.fields``; timestamp, level and message are lifted out.
    """

    name = "json"
    supported_formats = ["json", "json_lines", "ndjson", "json_structured"]

    TIMESTAMP_FIELDS = [
        "timestamp", "time", "@timestamp", "ts", "datetime",
        "created", "date", "logged_at", "log_time",
    ]

    LEVEL_FIELDS = [
        "level", "severity", "loglevel", "log_level", "lvl",
        "levelname", "priority", "PRIORITY",
    ]

    MESSAGE_FIELDS = [
        "message", "msg", "MESSAGE", "text", "log", "body", "event",
    ]

    def parse_line(self, line: str) -> LogRecord | None:
        record = LogRecord(raw=line)
        record.parser_name = self.name

        try:
            data = json.loads(line.strip())
        except json.JSONDecodeError as e:
            record.parse_errors.append(f"JSON decode error: {e}")
            record.message = line
            return record

        if not isinstance(data, dict):
            record.parse_errors.append("JSON is not an object")
            record.message = str(data)
            return record

        for key in self.TIMESTAMP_FIELDS:
            if key in data:
                ts = self._parse_timestamp(str(data[key]))
                if ts:
                    record.timestamp = ts
                break

        for key in self.LEVEL_FIELDS:
            if key in data:
                record.level = LogLevel.from_string(str(data[key]))
                break

        for key in self.MESSAGE_FIELDS:
            if key in data:
                record.message = str(data[key])
                break

        if not record.message:
            record.message = self._create_message_summary(data)

        known_fields = set(
            self.TIMESTAMP_FIELDS + self.LEVEL_FIELDS + self.MESSAGE_FIELDS
        )
        record.fields = {k: v for k, v in data.items() if k not in known_fields}

        return record

    def _create_message_summary(self, data: dict[str, Any]) -> str:
        parts = []
        for key in ["event", "action", "type", "status"]:
            if key in data:
                parts.append(f"{key}={data[key]}")

        if parts:
            return ", ".join(parts)

        items = list(data.items())[:3]
        return ", ".join(f"{k}={v}" for k, v in items)
