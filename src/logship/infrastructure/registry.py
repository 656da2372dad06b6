"""
Component registry: maps declaration kinds to source and sink classes.
"""

import threading

from logship.application.ports import SinkFactory, SinkPort, SourceFactory, SourcePort
from logship.config.models import Declaration
from logship.core.counters import ProcessCounters

__all__ = ["ComponentRegistry", "default_registry"]


class ComponentRegistry:
    """
    Lookup table from a declaration's kind tag to the factory building it.

    Factories are called as ``factory(declaration, cancel_event, counters)``;
    the source and sink classes have exactly that constructor.

    Usage:
        registry = default_registry()
        registry.register_sink("stdout", MyStdoutSink)
        sink = registry.create_sink(StdoutOutput(), event, counters)
    """

    def __init__(self):
        self._sources: dict[str, SourceFactory] = {}
        self._sinks: dict[str, SinkFactory] = {}

    def register_source(self, kind: str, factory: SourceFactory) -> None:
        self._sources[kind] = factory

    def register_sink(self, kind: str, factory: SinkFactory) -> None:
        self._sinks[kind] = factory

    def create_source(
        self,
        declaration: Declaration,
        cancel_event: threading.Event,
        counters: ProcessCounters,
    ) -> SourcePort:
        """
        Raises:
            KeyError: If no source is registered for the declaration's kind
        """
        try:
            factory = self._sources[declaration.kind]
        except KeyError:
            raise KeyError(f"No source registered for '{declaration.kind}'") from None
        return factory(declaration, cancel_event, counters)

    def create_sink(
        self,
        declaration: Declaration,
        cancel_event: threading.Event,
        counters: ProcessCounters,
    ) -> SinkPort:
        """
        Raises:
            KeyError: If no sink is registered for the declaration's kind
        """
        try:
            factory = self._sinks[declaration.kind]
        except KeyError:
            raise KeyError(f"No sink registered for '{declaration.kind}'") from None
        return factory(declaration, cancel_event, counters)

    def list_sources(self) -> list[str]:
        return list(self._sources.keys())

    def list_sinks(self) -> list[str]:
        return list(self._sinks.keys())


def default_registry() -> ComponentRegistry:
    """Registry holding every built-in source and sink."""
    # Import here to avoid circular imports
    from logship.infrastructure.sources import (
        JsonLogSource,
        IISLogSource,
        OSEventSource,
        GenericLogSource,
        TcpSource,
        StdinSource,
    )
    from logship.infrastructure.sinks import RedisSink, ElasticsearchSink, StdoutSink

    registry = ComponentRegistry()

    registry.register_sink("redis", RedisSink)
    registry.register_sink("elasticsearch", ElasticsearchSink)
    registry.register_sink("stdout", StdoutSink)

    registry.register_source("json_logs", JsonLogSource)
    registry.register_source("iis_logs", IISLogSource)
    registry.register_source("os_events", OSEventSource)
    registry.register_source("logs", GenericLogSource)
    registry.register_source("tcp", TcpSource)
    registry.register_source("stdin", StdinSource)

    return registry
