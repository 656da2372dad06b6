"""
Source adapters for logship.

These implement the SourcePort interface for every input kind.
"""

from logship.infrastructure.sources.base import BaseSource
from logship.infrastructure.sources.file_source import (
    TailFileSource,
    JsonLogSource,
    IISLogSource,
    GenericLogSource,
)
from logship.infrastructure.sources.event_source import OSEventSource
from logship.infrastructure.sources.tcp_source import TcpSource
from logship.infrastructure.sources.stdin_source import StdinSource

__all__ = [
    "BaseSource",
    "TailFileSource",
    "JsonLogSource",
    "IISLogSource",
    "GenericLogSource",
    "OSEventSource",
    "TcpSource",
    "StdinSource",
]
