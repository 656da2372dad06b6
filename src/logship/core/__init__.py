"""
Core data models, counters and base classes for logship.
"""

from logship.core.models import (
    LogLevel,
    RecordOrigin,
    NetworkInfo,
    HTTPInfo,
    LogRecord,
)
from logship.core.base import BaseParser
from logship.core.counters import ProcessCounters
from logship.core.exceptions import (
    LogshipError,
    ConfigurationNotFound,
    ConfigurationInvalid,
    DiagnosticsBootstrapFailure,
    SourceShutdownFailure,
    AssemblyError,
)

__all__ = [
    "LogLevel",
    "RecordOrigin",
    "NetworkInfo",
    "HTTPInfo",
    "LogRecord",
    "BaseParser",
    "ProcessCounters",
    "LogshipError",
    "ConfigurationNotFound",
    "ConfigurationInvalid",
    "DiagnosticsBootstrapFailure",
    "SourceShutdownFailure",
    "AssemblyError",
]
