"""
Core data models for logship.

Every source turns its input into LogRecord instances; every sink
serializes LogRecord instances for its destination.
"""

import socket
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from functools import total_ordering
from typing import Any
from uuid import UUID, uuid4

__all__ = [
    "LogLevel",
    "RecordOrigin",
    "NetworkInfo",
    "HTTPInfo",
    "LogRecord",
]


@total_ordering
class LogLevel(Enum):
    """
    Severity of a shipped record, ordered by severity.

    Example:
        LogLevel.from_string("warn")  # LogLevel.WARNING
        LogLevel.from_string("3")     # LogLevel.ERROR (journald PRIORITY)
    """
    TRACE = 0
    DEBUG = 10
    INFO = 20
    NOTICE = 25
    WARNING = 30
    ERROR = 40
    CRITICAL = 50
    ALERT = 60
    EMERGENCY = 70
    UNKNOWN = -1

    @classmethod
    def from_string(cls, level: str) -> "LogLevel":
        """Parse a level name, abbreviation or syslog priority number."""
        name = _LEVEL_ALIASES.get(str(level).lower().strip())
        return cls[name] if name else cls.UNKNOWN

    def __lt__(self, other: "LogLevel") -> bool:
        if self.__class__ is other.__class__:
            return self.value < other.value
        return NotImplemented


# Syslog severities 0-7 (RFC 5424), most severe first
_SYSLOG_SEVERITIES = (
    "EMERGENCY", "ALERT", "CRITICAL", "ERROR", "WARNING", "NOTICE", "INFO", "DEBUG",
)

_LEVEL_ALIASES: dict[str, str] = {
    **{str(number): name for number, name in enumerate(_SYSLOG_SEVERITIES)},
    **{name.lower(): name for name in _SYSLOG_SEVERITIES},
    "trace": "TRACE",
    "verbose": "TRACE",
    "information": "INFO",
    "warn": "WARNING",
    "err": "ERROR",
    "crit": "CRITICAL",
    "fatal": "CRITICAL",
    "emerg": "EMERGENCY",
}


@dataclass
class RecordOrigin:
    """Where a record was read: which input, which file/peer, which line."""
    input_name: str | None = None
    file_path: str | None = None
    line_number: int | None = None
    peer: str | None = None
    service: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


@dataclass
class NetworkInfo:
    """Client/server addressing found in web server logs."""
    source_ip: str | None = None
    destination_ip: str | None = None
    destination_port: int | None = None
    user_agent: str | None = None
    referer: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in self.__dict__.items() if v is not None}


@dataclass
class HTTPInfo:
    """HTTP request fields found in W3C/IIS logs."""
    method: str | None = None
    path: str | None = None
    query_string: str | None = None
    status_code: int | None = None
    substatus: int | None = None
    response_size: int | None = None
    response_time_ms: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in self.__dict__.items() if v is not None}


@dataclass
class LogRecord:
    """
    One record travelling from a source to every connected sink.

    `type` is the kind tag of the input that produced the record
    (``json_logs``, ``iis_logs``, ``tcp``...), mirroring the logstash
    ``type`` field the downstream stores index on.
    """
    id: UUID = field(default_factory=uuid4)
    raw: str = ""

    timestamp: datetime | None = None
    received_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    type: str = "unknown"
    level: LogLevel = LogLevel.UNKNOWN
    message: str = ""
    host: str = field(default_factory=socket.gethostname)

    fields: dict[str, Any] = field(default_factory=dict)
    origin: RecordOrigin = field(default_factory=RecordOrigin)
    network: NetworkInfo | None = None
    http: HTTPInfo | None = None

    parser_name: str = ""
    parse_errors: list[str] = field(default_factory=list)

    @property
    def effective_timestamp(self) -> datetime:
        """Event time when the input carried one, otherwise receive time."""
        return self.timestamp or self.received_at

    def formatted_timestamp(self, fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
        return self.effective_timestamp.strftime(fmt)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a logstash-style document."""
        result: dict[str, Any] = dict(self.fields)
        result.update({
            "@timestamp": self.effective_timestamp.isoformat(),
            "@version": "1",
            "id": str(self.id),
            "type": self.type,
            "host": self.host,
            "level": self.level.name,
            "message": self.message,
        })

        origin = self.origin.to_dict()
        if origin:
            result["origin"] = origin
        if self.network:
            result["network"] = self.network.to_dict()
        if self.http:
            result["http"] = self.http.to_dict()
        if self.parse_errors:
            result["parse_errors"] = list(self.parse_errors)

        return result
