"""
Base parser class for logship parsers.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from dateutil import parser as dateutil_parser

from logship.core.models import LogRecord, LogLevel

__all__ = ["BaseParser"]


TIMESTAMP_FORMATS = [
    # ISO 8601 variants
    "%Y-%m-%dT%H:%M:%S.%fZ",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S,%f",  # Python logging
    "%Y-%m-%d %H:%M:%S",     # W3C date + time
    "%Y/%m/%d %H:%M:%S",
    "%m/%d/%Y %H:%M:%S",
]


class BaseParser(ABC):
    """
    Base class for all line parsers.

    Subclasses must implement:
        - parse_line(line: str) -> LogRecord

    Parsers may keep state between lines (the W3C parser remembers the
    last ``#Fields`` directive), so every source owns its own instance.

    Attributes:
        name: Unique identifier for this parser
        supported_formats: List of format names this parser handles
    """

    name: str = "base"
    supported_formats: list[str] = []

    @abstractmethod
    def parse_line(self, line: str) -> LogRecord | None:
        """
        Parse a single line into a LogRecord.

        This method should never raise - a line that cannot be parsed
        becomes a record with parse_errors populated. Returns None for
        lines that carry no record (directives, blank lines).
        """
        pass

    def _parse_timestamp(self, value: str) -> datetime | None:
        """
        Try to parse a timestamp string using multiple formats.

        Returns:
            datetime object or None if parsing fails
        """
        if not value:
            return None

        value = value.strip()

        for fmt in TIMESTAMP_FORMATS:
            try:
                return datetime.strptime(value, fmt)
            except ValueError:
                continue

        try:
            return dateutil_parser.parse(value)
        except (ValueError, TypeError, OverflowError):
            return None

    def _infer_level_from_message(self, message: str) -> LogLevel:
        message_lower = message.lower()

        if any(kw in message_lower for kw in [
            "error", "exception", "failed", "failure", "fatal", "panic"
        ]):
            return LogLevel.ERROR

        if any(kw in message_lower for kw in ["warn", "deprecated"]):
            return LogLevel.WARNING

        if any(kw in message_lower for kw in ["debug", "trace"]):
            return LogLevel.DEBUG

        return LogLevel.INFO
