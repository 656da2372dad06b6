"""
Pipeline orchestrator use case.

Turns a configuration into a running graph of sources and sinks:
every sink is connected to every source, then the sources start.
"""

import logging
import threading
from contextlib import ExitStack
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from rich.console import Console

from logship.application.ports import SinkPort, SourcePort
from logship.config.loader import load_configuration
from logship.config.models import Configuration, Declaration
from logship.core.counters import ProcessCounters
from logship.core.exceptions import AssemblyError, SourceShutdownFailure
from logship.diagnostics import DiagnosticsHandle, initialize
from logship.infrastructure.registry import ComponentRegistry, default_registry

__all__ = ["PipelineOrchestrator"]

logger = logging.getLogger(__name__)


class PipelineOrchestrator:
    """
    Use case: assemble and own the agent's pipeline.

    Assembly is strictly two-phase. All sinks are built (outputs in
    declaration order), then all sources (inputs in declaration order);
    only then is every sink connected to every source, and only after
    the wiring is complete are the sources started, so no record is
    emitted before every sink listens.

    If any source or sink cannot be built or started, everything built so
    far is stopped and AssemblyError is raised: a pipeline is either
    fully wired or not running at all.

    Example:
        cancel = threading.Event()
        pipeline = PipelineOrchestrator.assemble("conf.d/", "info", "/var/log", cancel)
        ...
        cancel.set()
        pipeline.shutdown()
    """

    def __init__(
        self,
        configuration: Configuration,
        cancel_event: threading.Event | None = None,
        registry: ComponentRegistry | None = None,
        config_path: str | None = None,
        log_directory: str | None = None,
    ):
        """
        Initialize an unassembled orchestrator.

        Args:
            configuration: The loaded configuration
            cancel_event: Shared cancellation signal handed to every component
            registry: Source/sink factories (default: the built-in ones)
            config_path: Where the configuration was read from (diagnostics only)
            log_directory: Where diagnostics are written (diagnostics only)
        """
        self.started_on = datetime.now(timezone.utc)
        self.configuration = configuration
        self.cancel_event = cancel_event or threading.Event()
        self.registry = registry or default_registry()
        self.config_path = config_path
        self.log_directory = log_directory
        self.counters = ProcessCounters()
        self.diagnostics: DiagnosticsHandle | None = None

        self._sinks: list[SinkPort] = []
        self._sources: list[SourcePort] = []
        self._connections = 0
        self._assembled = False
        self._shut_down = False

    @classmethod
    def assemble(
        cls,
        config_path: str | Path,
        minimum_level: str,
        log_directory: str | Path,
        cancel_event: threading.Event,
        registry: ComponentRegistry | None = None,
        console: Console | None = None,
    ) -> "PipelineOrchestrator":
        """
        Bootstrap diagnostics, load the configuration and build the pipeline.

        Args:
            config_path: Configuration file, or directory of configuration files
            minimum_level: Global diagnostics level name ("info", "warning"...)
            log_directory: Root directory for the diagnostics log
            cancel_event: Shared cancellation signal
            registry: Source/sink factories (default: the built-in ones)
            console: Console for diagnostics output (default: stderr)

        Returns:
            A running orchestrator

        Raises:
            DiagnosticsBootstrapFailure: If the diagnostics log cannot be opened
            ConfigurationNotFound: If config_path is neither a file nor a directory
            ConfigurationInvalid: If the configuration has the wrong shape
            AssemblyError: If a source or sink cannot be built or started
        """
        diagnostics = initialize(minimum_level, log_directory, console=console)
        logger.info("Log directory %s", Path(log_directory).resolve())
        logger.info("Logging level: %s", diagnostics.level_name)

        configuration = load_configuration(config_path)

        orchestrator = cls(
            configuration,
            cancel_event=cancel_event,
            registry=registry,
            config_path=str(Path(config_path).resolve()),
            log_directory=str(Path(log_directory).resolve()),
        )
        orchestrator.diagnostics = diagnostics
        orchestrator.build()
        return orchestrator

    def build(self) -> None:
        """
        Build, wire and start every declared component.

        Raises:
            AssemblyError: If a source or sink cannot be built or started;
                nothing is left running in that case
            RuntimeError: If called twice
        """
        if self._assembled:
            raise RuntimeError("Pipeline is already assembled")

        with ExitStack() as rollback:
            # Registered first so it runs last, after every component is released
            rollback.callback(self._reset)

            for index, declaration in enumerate(self.configuration.outputs):
                sink = self._create(self.registry.create_sink, declaration, index)
                rollback.callback(self._release_sink, sink)
                self._sinks.append(sink)

            for index, declaration in enumerate(self.configuration.inputs):
                source = self._create(self.registry.create_source, declaration, index)
                rollback.callback(self._release_source, source)
                self._sources.append(source)

            self._wire()

            for source in self._sources:
                try:
                    source.start()
                except Exception as e:
                    raise AssemblyError(
                        f"Cannot start source {source.name}: {e}",
                        kind=getattr(source, "kind", None),
                    ) from e

            rollback.pop_all()

        self._assembled = True
        logger.info(
            "Pipeline assembled: %d sinks, %d sources, %d connections",
            len(self._sinks), len(self._sources), self._connections,
        )

    def _create(
        self,
        factory: Callable[[Declaration, threading.Event, ProcessCounters], object],
        declaration: Declaration,
        index: int,
    ):
        logger.debug("Creating %s %s[%d]", declaration.role, declaration.kind, index)
        try:
            return factory(declaration, self.cancel_event, self.counters)
        except Exception as e:
            raise AssemblyError(
                f"Cannot create {declaration.role} '{declaration.display_name}': {e}",
                kind=declaration.kind,
                index=index,
            ) from e

    def _wire(self) -> None:
        for source in self._sources:
            for sink in self._sinks:
                try:
                    sink.connect(source)
                except Exception:
                    # One failed link must not cost the other sink/source pairs
                    logger.exception("Sink %s could not connect to source %s", sink.name, source.name)
                else:
                    self._connections += 1

    def _reset(self) -> None:
        self._sources.clear()
        self._sinks.clear()
        self._connections = 0

    @staticmethod
    def _release_source(source: SourcePort) -> None:
        try:
            source.stop()
        except Exception:
            logger.exception("Source %s failed to stop during rollback", source.name)

    @staticmethod
    def _release_sink(sink: SinkPort) -> None:
        try:
            sink.stop()
        except Exception:
            logger.exception("Sink %s failed to stop during rollback", sink.name)

    @property
    def sources(self) -> tuple[SourcePort, ...]:
        return tuple(self._sources)

    @property
    def sinks(self) -> tuple[SinkPort, ...]:
        return tuple(self._sinks)

    @property
    def connection_count(self) -> int:
        """Number of established sink-source links."""
        return self._connections

    @property
    def num_connections(self) -> int:
        """Open network connections across all sources."""
        return self.counters.connections

    @property
    def num_messages(self) -> int:
        """Records observed across all sources."""
        return self.counters.messages

    def increment_message_count(self, count: int = 1) -> None:
        """Add to the record counter; safe from any number of threads."""
        self.counters.add_messages(count)

    def shutdown(self) -> None:
        """
        Stop every source, then every sink.

        A component failing to stop is logged and the others are still
        stopped. Calling this again has no further effect.
        """
        if self._shut_down:
            return
        self._shut_down = True
        logger.info("Shutting down")

        for source in self._sources:
            try:
                source.stop()
            except Exception as e:
                failure = SourceShutdownFailure(
                    f"Source {source.name} failed to stop: {e}",
                    source_name=source.name,
                )
                logger.error("%s", failure, exc_info=e)

        for sink in self._sinks:
            try:
                sink.stop()
            except Exception:
                logger.exception("Sink %s failed to stop", sink.name)

    def uptime(self) -> float:
        return (datetime.now(timezone.utc) - self.started_on).total_seconds()

    def stats(self) -> dict:
        """Snapshot for monitoring: start time, counters and component metadata."""
        return {
            "started_on": self.started_on.isoformat(),
            "uptime_seconds": round(self.uptime(), 3),
            "config_path": self.config_path,
            "log_directory": self.log_directory,
            **self.counters.snapshot(),
            "sources": [self._describe(source) for source in self._sources],
            "sinks": [self._describe(sink) for sink in self._sinks],
        }

    @staticmethod
    def _describe(component) -> dict[str, str]:
        metadata = getattr(component, "metadata", None)
        if callable(metadata):
            return metadata()
        return {"name": component.name}

    def __enter__(self) -> "PipelineOrchestrator":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()
