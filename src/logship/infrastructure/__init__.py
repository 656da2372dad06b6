"""
Infrastructure layer for logship.

Contains adapters that implement the ports defined in the application layer.
These connect the pipeline to files, sockets, subprocesses and remote stores.
"""

from logship.infrastructure.sources import (
    BaseSource,
    JsonLogSource,
    IISLogSource,
    OSEventSource,
    GenericLogSource,
    TcpSource,
    StdinSource,
)
from logship.infrastructure.sinks import (
    BaseSink,
    RedisSink,
    ElasticsearchSink,
    StdoutSink,
)
from logship.infrastructure.registry import ComponentRegistry, default_registry

__all__ = [
    # Sources
    "BaseSource",
    "JsonLogSource",
    "IISLogSource",
    "OSEventSource",
    "GenericLogSource",
    "TcpSource",
    "StdinSource",
    # Sinks
    "BaseSink",
    "RedisSink",
    "ElasticsearchSink",
    "StdoutSink",
    # Registry
    "ComponentRegistry",
    "default_registry",
]
