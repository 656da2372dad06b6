"""
logship - a host log shipping agent.

Reads log records from files, the OS event log, TCP and stdin, and
broadcasts every record to every configured output.

Usage:
    import threading
    from logship import assemble

    cancel = threading.Event()
    pipeline = assemble("conf.d/", minimum_level="info", log_directory="/var/log")
    ...
    pipeline.shutdown()

    # Or build from an in-memory configuration
    from logship import Configuration, PipelineOrchestrator
    config = Configuration.from_dict({"stdin": [{}], "stdout": [{}]})
    with PipelineOrchestrator(config) as pipeline:
        pipeline.build()
"""

__version__ = "0.1.0"

import threading

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
from logship.config import Configuration, load_configuration
from logship.parsers import ParserRegistry, registry
from logship.application import PipelineOrchestrator, SourcePort, SinkPort
from logship.infrastructure import ComponentRegistry, default_registry

__all__ = [
    # Version
    "__version__",
    # Core models
    "LogLevel",
    "RecordOrigin",
    "NetworkInfo",
    "HTTPInfo",
    "LogRecord",
    "ProcessCounters",
    # Base classes
    "BaseParser",
    # Exceptions
    "LogshipError",
    "ConfigurationNotFound",
    "ConfigurationInvalid",
    "DiagnosticsBootstrapFailure",
    "SourceShutdownFailure",
    "AssemblyError",
    # Configuration
    "Configuration",
    "load_configuration",
    # Registries
    "ParserRegistry",
    "registry",
    "ComponentRegistry",
    "default_registry",
    # Pipeline
    "PipelineOrchestrator",
    "SourcePort",
    "SinkPort",
    # Convenience functions
    "assemble",
]


def assemble(
    config_path: str,
    minimum_level: str = "info",
    log_directory: str = ".",
    cancel_event: threading.Event | None = None,
) -> PipelineOrchestrator:
    """
    Bootstrap diagnostics and start a pipeline from a configuration path.

    Args:
        config_path: Configuration file, or directory of configuration files
        minimum_level: Minimum diagnostics level ("trace" ... "off")
        log_directory: Root directory for the diagnostics log
        cancel_event: Shared cancellation signal (a new one if omitted)

    Returns:
        A running PipelineOrchestrator
    """
    return PipelineOrchestrator.assemble(
        config_path,
        minimum_level,
        log_directory,
        cancel_event or threading.Event(),
    )
